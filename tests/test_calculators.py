from backend.calculators import estimate_one_rep_max, percentage_table, plate_breakdown


def test_one_rep_max():
    assert estimate_one_rep_max(100, 1) == 100
    assert estimate_one_rep_max(100, 10) == 133
    assert estimate_one_rep_max(0, 5) == 0


def test_percentage_table():
    table = percentage_table(200)
    assert table[0] == (95, 190.0)
    assert table[-1] == (50, 100.0)
    assert len(table) == 10


def test_plate_breakdown():
    assert plate_breakdown(100) == [25.0, 15.0]
    assert plate_breakdown(62.5) == [20.0, 1.25]
    assert plate_breakdown(20) == []
    # 1kg per side cannot be loaded
    assert plate_breakdown(22) == []
