import numpy as np

from airink.ink import BRUSH_SIZES, ColorPalette, Tool
from airink.menu import MenuSelection, ToolboxMenu, build_layout


def center_of(item):
    x0, y0, x1, y1 = item.rect
    return ((x0 + x1) / 2, (y0 + y1) / 2)


def find(menu, item_id):
    return next(i for i in menu.items if i.item_id == item_id)


def test_layout_covers_all_choices():
    items = build_layout()
    kinds = [i.selection.kind for i in items]
    assert kinds.count('tool') == 2
    assert kinds.count('color') == len(ColorPalette.get_all())
    assert kinds.count('size') == len(BRUSH_SIZES)


def test_layout_items_do_not_overlap():
    items = build_layout()
    for item in items:
        hits = [other for other in items if other.contains(center_of(item))]
        assert hits == [item]


def test_dwell_selects_once_and_restarts():
    menu = ToolboxMenu(select_step=0.25)
    cursor = center_of(find(menu, 'tool-eraser'))

    results = [menu.update(cursor) for _ in range(5)]
    assert results[:4] == [None] * 4
    assert results[4] == MenuSelection('tool', Tool.ERASER)
    assert menu.progress == 0.0

    # Keeps hovering: another full dwell is needed
    assert [menu.update(cursor) for _ in range(3)] == [None] * 3


def test_moving_to_another_item_resets_progress():
    menu = ToolboxMenu(select_step=0.25)
    pen = center_of(find(menu, 'tool-pen'))
    size = center_of(find(menu, f'size-{BRUSH_SIZES[-1]}'))

    menu.update(pen)
    menu.update(pen)
    assert menu.progress > 0

    assert menu.update(size) is None
    assert menu.hover_id == f'size-{BRUSH_SIZES[-1]}'
    assert menu.progress == 0.0


def test_hidden_cursor_or_empty_space_resets():
    menu = ToolboxMenu(select_step=0.25)
    pen = center_of(find(menu, 'tool-pen'))
    menu.update(pen)
    menu.update(pen)

    assert menu.update(None) is None
    assert menu.hover_id is None
    assert menu.progress == 0.0

    menu.update(pen)
    assert menu.update((0.02, 0.98)) is None
    assert menu.hover_id is None


def test_default_step_selects_after_25_frames():
    menu = ToolboxMenu()
    cursor = center_of(find(menu, 'color-0'))
    menu.update(cursor)
    results = [menu.update(cursor) for _ in range(25)]
    assert results[-1] == MenuSelection('color', ColorPalette.RED)
    assert all(r is None for r in results[:-1])


def test_draw_returns_frame_of_same_shape():
    menu = ToolboxMenu()
    frame = np.zeros((360, 640, 3), dtype=np.uint8)
    out = menu.draw(frame, Tool.PEN, ColorPalette.WHITE, 6, (0.5, 0.5))
    assert out.shape == frame.shape
    assert out.any()
