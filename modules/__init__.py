"""
Gesture Graph Control modules.

Modules:
    - capture: Camera frame acquisition
    - detection: MediaPipe hand landmark detection
    - recognition: Smoothing, coordinate remapping, gesture classification
    - control: Mode state machine and drag/rotate/zoom/hover controllers
    - scene: 3D graph scene, camera and orbit controls
    - utils: Configuration, logging, performance monitoring
    - visualization: OpenCV preview window
"""
