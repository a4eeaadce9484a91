from airink.camera import Camera


def test_resolution_before_start_is_requested_size():
    camera = Camera(camera_id=0, width=640, height=480, fps=30)
    assert camera.get_resolution() == (640, 480)
    assert camera.get_frame() is None


def test_stop_without_start_is_safe():
    camera = Camera(camera_id=0, width=640, height=480)
    camera.stop()
    assert camera.cap is None
