"""Tests for the greedy placement engine.

Tests cover:
- Dimension resolution with edge banding
- Kerf-inflated overlap checks
- Placement search order, rotation and grain policy
- Per-panel layouts and run-level aggregation
- Conversion from JSON dictionaries
"""

import itertools

import pytest

from freecut.core.optimizer_core import (
    CutPiece, CutPosition, EdgeBand, GreedyOptimizer, Groove, GrooveDirection, GrooveLength,
    OptimizationParams, OptimizationResult, Pattern, RotationMode, Side, StockPiece,
    _inflate, can_place_piece, cut_from_dict, optimize, params_from_dict, rects_intersect,
    resolve_cutting_dimensions, result_from_dict, stock_from_dict
)


def _assert_no_kerf_overlap(layout, kerf):
    for a, b in itertools.combinations(layout.positions, 2):
        rect_a = _inflate(a.x, a.y, a.width, a.height, kerf)
        rect_b = _inflate(b.x, b.y, b.width, b.height, kerf)
        assert not rects_intersect(rect_a, rect_b)


# =============================================================================
# Dimension resolver
# =============================================================================


class TestResolveCuttingDimensions:
    def test_no_edge_band_returns_nominal(self):
        cut = CutPiece(id="c", width=400, height=300)
        assert resolve_cutting_dimensions(cut) == (400, 300)

    def test_band_on_all_sides(self, banded_square):
        assert resolve_cutting_dimensions(banded_square) == (496, 496)

    def test_band_on_some_sides(self):
        band = EdgeBand(name="ABS", thickness=1, left=True, top=True)
        cut = CutPiece(id="c", width=400, height=300, edge_band=band)
        assert resolve_cutting_dimensions(cut) == (399, 299)

    def test_zero_thickness_is_ignored(self):
        band = EdgeBand(name="none", thickness=0, top=True, bottom=True, left=True, right=True)
        cut = CutPiece(id="c", width=400, height=300, edge_band=band)
        assert resolve_cutting_dimensions(cut) == (400, 300)

    def test_dimensions_floor_at_one(self):
        band = EdgeBand(name="thick", thickness=300, top=True, bottom=True, left=True, right=True)
        cut = CutPiece(id="c", width=500, height=500, edge_band=band)
        assert resolve_cutting_dimensions(cut) == (1, 1)


# =============================================================================
# Overlap checker
# =============================================================================


class TestOverlap:
    def test_separated_rectangles(self):
        assert not rects_intersect((0, 0, 10, 10), (11, 0, 20, 10))

    def test_touching_rectangles_intersect(self):
        assert rects_intersect((0, 0, 10, 10), (10, 0, 20, 10))

    def test_empty_layout_accepts_anything(self):
        assert can_place_piece([], 0, 0, 100, 100, 3)

    def test_kerf_applies_to_both_rectangles(self):
        placed = [CutPosition(piece_id="a", x=0, y=0, width=100, height=100)]
        # Инфляция на полный пропил с каждой стороны: нужен зазор больше 2*kerf
        assert not can_place_piece(placed, 106, 0, 50, 50, 3)
        assert can_place_piece(placed, 107, 0, 50, 50, 3)

    def test_zero_kerf_still_rejects_touching(self):
        placed = [CutPosition(piece_id="a", x=0, y=0, width=100, height=100)]
        assert not can_place_piece(placed, 100, 0, 50, 50, 0)


# =============================================================================
# Placement search
# =============================================================================


class TestFindPlacement:
    def test_first_piece_goes_to_origin(self, square_stock):
        optimizer = GreedyOptimizer()
        cut = CutPiece(id="c", width=400, height=300)
        placement = optimizer.find_placement([], square_stock, cut, (400, 300))
        assert placement == CutPosition(piece_id="c", x=0, y=0, width=400, height=300, rotated=False)

    def test_scan_prefers_lower_x_before_lower_y(self, square_stock):
        optimizer = GreedyOptimizer()
        cut = CutPiece(id="c", width=400, height=300)
        placed = [CutPosition(piece_id="c", x=0, y=0, width=400, height=300)]
        placement = optimizer.find_placement(placed, square_stock, cut, (400, 300))
        assert (placement.x, placement.y) == (0, 310)

    def test_rotation_used_when_only_rotated_fits(self):
        optimizer = GreedyOptimizer()
        stock = StockPiece(id="s", width=100, height=70)
        cut = CutPiece(id="c", width=60, height=90)
        placement = optimizer.find_placement([], stock, cut, (60, 90))
        assert placement.rotated
        assert (placement.width, placement.height) == (90, 60)

    def test_vertical_pattern_forbids_rotation(self, vertical_grain_cut):
        optimizer = GreedyOptimizer()
        stock = StockPiece(id="s", width=100, height=70)
        assert optimizer.find_placement([], stock, vertical_grain_cut, (60, 90)) is None

    def test_horizontal_pattern_forbids_rotation(self):
        optimizer = GreedyOptimizer()
        stock = StockPiece(id="s", width=70, height=100)
        cut = CutPiece(id="c", width=90, height=60, pattern=Pattern.HORIZONTAL)
        assert optimizer.find_placement([], stock, cut, (90, 60)) is None

    def test_rotation_mode_none_forbids_rotation(self):
        optimizer = GreedyOptimizer(OptimizationParams(rotation_mode=RotationMode.NONE))
        stock = StockPiece(id="s", width=100, height=70)
        cut = CutPiece(id="c", width=60, height=90)
        assert optimizer.find_placement([], stock, cut, (60, 90)) is None

    def test_square_piece_is_never_rotated(self):
        optimizer = GreedyOptimizer()
        stock = StockPiece(id="s", width=100, height=100)
        cut = CutPiece(id="c", width=80, height=80, pattern=Pattern.VERTICAL)
        placement = optimizer.find_placement([], stock, cut, (80, 80))
        assert placement is not None
        assert not placement.rotated

    def test_piece_exactly_stock_size_fits(self):
        optimizer = GreedyOptimizer()
        stock = StockPiece(id="s", width=100, height=100)
        cut = CutPiece(id="c", width=100, height=100)
        assert optimizer.find_placement([], stock, cut, (100, 100)) is not None

    def test_non_positive_grid_step_rejected(self):
        with pytest.raises(ValueError):
            GreedyOptimizer(OptimizationParams(grid_step=0))


# =============================================================================
# Layouts and aggregation
# =============================================================================


class TestOptimize:
    def test_basic_scenario(self, basic_result):
        assert len(basic_result.layouts) == 1
        layout = basic_result.layouts[0]
        assert len(layout.positions) == 2
        assert layout.utilization_rate == pytest.approx(24.0)
        assert layout.waste_area == pytest.approx(760000)
        assert basic_result.average_utilization == pytest.approx(24.0)
        assert basic_result.total_waste == pytest.approx(760000)
        assert basic_result.total_stock_used == 1
        assert basic_result.total_cuts_needed == 2
        assert basic_result.cuts_placed == 2
        _assert_no_kerf_overlap(layout, 3)

    def test_layout_carries_stock_size(self, basic_result):
        layout = basic_result.layouts[0]
        assert (layout.stock_id, layout.stock_width, layout.stock_height) == ("stock_1", 1000, 1000)

    def test_edge_band_size_is_placed(self, square_stock, banded_square):
        result = optimize([square_stock], [banded_square])
        pos = result.layouts[0].positions[0]
        assert (pos.width, pos.height) == (496, 496)

    def test_area_conservation(self, square_stock):
        cuts = [CutPiece(id="a", width=333, height=250, quantity=5),
                CutPiece(id="b", width=120, height=80, quantity=7)]
        result = optimize([square_stock], cuts, 4)
        for layout in result.layouts:
            assert layout.used_area + layout.waste_area == pytest.approx(layout.total_area)
            assert 0 <= layout.utilization_rate <= 100
            _assert_no_kerf_overlap(layout, 4)

    def test_positions_stay_inside_stock(self, square_stock):
        cuts = [CutPiece(id="a", width=450, height=450, quantity=6)]
        layout = optimize([square_stock], cuts).layouts[0]
        for pos in layout.positions:
            assert pos.x >= 0 and pos.y >= 0
            assert pos.x + pos.width <= 1000
            assert pos.y + pos.height <= 1000

    def test_largest_piece_placed_first(self, square_stock):
        cuts = [CutPiece(id="small", width=100, height=100),
                CutPiece(id="big", width=500, height=500)]
        layout = optimize([square_stock], cuts).layouts[0]
        assert [pos.piece_id for pos in layout.positions] == ["big", "small"]

    def test_equal_area_keeps_input_order(self, square_stock):
        cuts = [CutPiece(id="first", width=200, height=100),
                CutPiece(id="second", width=100, height=200)]
        layout = optimize([square_stock], cuts).layouts[0]
        assert [pos.piece_id for pos in layout.positions] == ["first", "second"]

    def test_every_panel_instance_gets_full_demand(self, two_rectangles):
        stock = StockPiece(id="s", width=1000, height=1000, quantity=2)
        result = optimize([stock], [two_rectangles])
        assert len(result.layouts) == 2
        assert [len(layout.positions) for layout in result.layouts] == [2, 2]
        assert result.cuts_placed == 4
        assert result.total_stock_used == 1
        assert result.average_utilization == pytest.approx(24.0)

    def test_average_utilization_is_area_weighted(self):
        big = StockPiece(id="big", width=1000, height=1000)
        small = StockPiece(id="small", width=100, height=100)
        cut = CutPiece(id="c", width=100, height=100)
        result = optimize([big, small], [cut])
        # 2 детали по 10000 на 1010000 общей площади
        assert result.average_utilization == pytest.approx(20000 / 1010000 * 100)
        assert [layout.utilization_rate for layout in result.layouts] == pytest.approx([1.0, 100.0])

    def test_unplaceable_piece_is_omitted(self, square_stock):
        cuts = [CutPiece(id="huge", width=2000, height=2000),
                CutPiece(id="ok", width=100, height=100)]
        result = optimize([square_stock], cuts)
        assert [pos.piece_id for pos in result.layouts[0].positions] == ["ok"]
        assert result.total_cuts_needed == 2
        assert result.cuts_placed == 1

    def test_zero_area_stock_has_zero_utilization(self):
        stock = StockPiece(id="flat", width=0, height=100)
        result = optimize([stock], [CutPiece(id="c", width=10, height=10)])
        assert result.layouts[0].utilization_rate == 0.0
        assert result.layouts[0].positions == []
        assert result.average_utilization == 0.0

    def test_zero_quantity_stock_produces_no_layouts(self, two_rectangles):
        stock = StockPiece(id="s", width=1000, height=1000, quantity=0)
        result = optimize([stock], [two_rectangles])
        assert result.layouts == []
        assert result.average_utilization == 0.0
        assert not result.success

    @pytest.mark.parametrize("stock, cuts", [
        ([], [CutPiece(id="c", width=10, height=10)]),
        ([StockPiece(id="s", width=100, height=100)], []),
        ([], []),
    ])
    def test_empty_input_gives_empty_result(self, stock, cuts):
        assert optimize(stock, cuts) == OptimizationResult()

    def test_deterministic(self, square_stock):
        cuts = [CutPiece(id="a", width=310, height=190, quantity=4),
                CutPiece(id="b", width=95, height=420, quantity=3)]
        assert optimize([square_stock], cuts) == optimize([square_stock], cuts)

    def test_thread_pool_keeps_instance_order(self, two_rectangles):
        stock = [StockPiece(id="a", width=1000, height=1000, quantity=2),
                 StockPiece(id="b", width=800, height=600, quantity=2)]
        sequential = optimize(stock, [two_rectangles], params=OptimizationParams(max_workers=1))
        parallel = optimize(stock, [two_rectangles], params=OptimizationParams(max_workers=3))
        assert parallel == sequential
        assert [layout.stock_id for layout in parallel.layouts] == ["a", "a", "b", "b"]

    def test_progress_reaches_100(self, two_rectangles):
        stock = StockPiece(id="s", width=1000, height=1000, quantity=4)
        progress = []
        optimize([stock], [two_rectangles], progress_fn=progress.append)
        assert progress == pytest.approx([25.0, 50.0, 75.0, 100.0])

    def test_kerf_argument_sets_clearance(self, square_stock, two_rectangles):
        layout = optimize([square_stock], [two_rectangles], kerf=10).layouts[0]
        assert (layout.positions[1].x, layout.positions[1].y) == (0, 330)

    def test_groove_does_not_change_placement(self, square_stock, two_rectangles):
        grooved = CutPiece(id="cut_1", width=400, height=300, quantity=2,
                           groove=Groove(enabled=True, width=4, offset_side=Side.TOP, offset=10))
        plain = optimize([square_stock], [two_rectangles])
        assert optimize([square_stock], [grooved]).layouts == plain.layouts

    def test_patterned_pieces_never_come_back_rotated(self):
        stock = StockPiece(id="s", width=1000, height=700)
        # Полоса 80x900 помещается только повернутой (900x80 под крупной деталью)
        cuts = [CutPiece(id="grain_h", width=900, height=600, pattern=Pattern.HORIZONTAL),
                CutPiece(id="grain_v", width=80, height=900, pattern=Pattern.VERTICAL),
                CutPiece(id="free", width=80, height=900)]
        result = optimize([stock], cuts)

        positions = {pos.piece_id: pos for pos in result.layouts[0].positions}
        assert set(positions) == {"grain_h", "free"}
        assert positions["free"].rotated
        assert not positions["grain_h"].rotated

    def test_negative_quantity_adds_no_demand(self, square_stock, two_rectangles):
        broken = CutPiece(id="broken", width=100, height=100, quantity=-3)
        result = optimize([square_stock], [two_rectangles, broken])
        assert result.total_cuts_needed == 2
        assert result.cuts_placed == 2


# =============================================================================
# Groove geometry
# =============================================================================


class TestGroove:
    def test_full_length_follows_direction(self):
        assert Groove(enabled=True, width=4).resolved_length(400, 300) == 400
        vertical = Groove(enabled=True, width=4, direction=GrooveDirection.VERTICAL)
        assert vertical.resolved_length(400, 300) == 300

    def test_custom_length_is_capped(self):
        groove = Groove(enabled=True, width=4, length=GrooveLength.CUSTOM, length_value=1000)
        assert groove.resolved_length(400, 300) == 400


# =============================================================================
# Conversion helpers
# =============================================================================


class TestFromDict:
    def test_stock_defaults(self):
        stock = stock_from_dict({"width": "1000", "height": 500}, 2)
        assert stock == StockPiece(id="stock_3", width=1000, height=500, quantity=1)

    def test_grain_alias(self):
        stock = stock_from_dict({"width": 100, "height": 100, "grain": "horizontal"})
        assert stock.pattern == Pattern.HORIZONTAL

    def test_cut_with_band_and_groove(self):
        cut = cut_from_dict({
            "id": "door",
            "width": 500,
            "height": 400,
            "quantity": 2,
            "pattern": "vertical",
            "edge_band": {"name": "ПВХ", "thickness": 2, "sides": {"top": True, "left": True}},
            "groove": {"enabled": True, "width": 4, "direction": "vertical",
                       "length": "custom", "length_value": 200, "offset_side": "right", "offset": 15},
        })
        assert cut.edge_band == EdgeBand(name="ПВХ", thickness=2, top=True, left=True)
        assert cut.groove == Groove(enabled=True, width=4, direction=GrooveDirection.VERTICAL,
                                    length=GrooveLength.CUSTOM, length_value=200,
                                    offset_side=Side.RIGHT, offset=15)
        assert not cut.can_rotate

    def test_cut_to_dict_is_accepted_back(self):
        cut = CutPiece(id="c", width=400, height=300, quantity=3, name="Полка",
                       edge_band=EdgeBand(name="ABS", thickness=1, bottom=True),
                       groove=Groove(enabled=True, width=4, offset_side=Side.BOTTOM, offset=8))
        assert cut_from_dict(cut.to_dict()) == cut

    def test_missing_width_raises(self):
        with pytest.raises(KeyError):
            cut_from_dict({"height": 100})

    @pytest.mark.parametrize("converter, data", [
        (cut_from_dict, {"width": 400, "height": 300, "quantity": -3}),
        (cut_from_dict, {"width": -50, "height": 100}),
        (cut_from_dict, {"width": 50, "height": -100}),
        (stock_from_dict, {"width": 1000, "height": 1000, "quantity": -1}),
        (stock_from_dict, {"width": -1000, "height": 1000}),
    ])
    def test_negative_size_or_quantity_raises(self, converter, data):
        with pytest.raises(ValueError):
            converter(data)

    def test_zero_quantity_is_accepted(self):
        assert cut_from_dict({"width": 400, "height": 300, "quantity": 0}).quantity == 0

    def test_unknown_pattern_raises(self):
        with pytest.raises(ValueError):
            stock_from_dict({"width": 100, "height": 100, "pattern": "diagonal"})

    def test_params_from_dict(self):
        params = params_from_dict({"kerf": 4, "grid_step": 5, "allow_rotation": False})
        assert params == OptimizationParams(kerf=4, grid_step=5, rotation_mode=RotationMode.NONE)
        assert params_from_dict(None) == OptimizationParams()

    def test_result_from_dict(self, basic_result):
        assert result_from_dict(basic_result.to_dict()) == basic_result
