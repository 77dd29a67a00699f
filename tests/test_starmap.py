"""StarMap engine: per-frame pipeline, notifications and selection state."""

import logging
import math
from datetime import timedelta

import pytest

from skydome.compute import InvalidCoordinateError, local_sidereal_time
from skydome.models import DomeGeometry, Observer, Range, RangeFilter
from skydome.starmap import StarMap

from conftest import make_star

EQUATOR = Observer(latitude=0.0, longitude=0.0)


@pytest.fixture
def lst(instant):
    return local_sidereal_time(instant, EQUATOR.longitude)


@pytest.fixture
def zenith_star(lst):
    return make_star("Zenith", ra=lst, dec=0.0, magnitude=0.5, spectral_class="B3V")


@pytest.fixture
def low_star(lst):
    # Hour angle 100° at the equator → altitude -10°
    return make_star("Low", ra=(lst - 100.0) % 360, dec=0.0, magnitude=3.0, spectral_class="M2III")


@pytest.fixture
def deep_star(lst):
    # Hour angle 180° at the equator → altitude -90°, 2 radii out
    return make_star("Deep", ra=(lst - 180.0) % 360, dec=0.0, magnitude=1.0)


@pytest.fixture
def sky(dome, instant, zenith_star, low_star, deep_star):
    return StarMap(
        [zenith_star, low_star, deep_star],
        dome,
        observer=EQUATOR,
        clock=lambda: instant,
    )


def test_zenith_star_is_drawn_at_center(sky, dome, zenith_star):
    frame = sky.render()
    drawn = {g.star: g for g in frame.stars}
    g = drawn[zenith_star]
    assert g.x == pytest.approx(dome.center_x)
    assert g.y == pytest.approx(dome.center_y)
    assert g.alpha == 1.0
    assert g.color == "#88aaff"
    assert g.show_label


def test_below_horizon_star_is_dimmed(sky, low_star):
    frame = sky.render()
    g = next(g for g in frame.stars if g.star == low_star)
    assert g.altitude == pytest.approx(-10.0)
    assert g.alpha == 0.3
    assert g.color == "#ffaa77"
    assert not g.show_label


def test_far_below_horizon_star_is_culled(sky, deep_star, dome):
    frame = sky.render()
    assert deep_star not in [g.star for g in frame.stars]
    assert all(dome.contains(g.x, g.y, 1.5) for g in frame.stars)


def test_counts_reported_after_each_pass(sky):
    events = []
    sky.on_stars_filtered(lambda visible, total: events.append((visible, total)))
    sky.render()
    sky.set_range_filters(Range(0, 1), Range(0, 3000), Range(0, 15), Range(0.1, 50))
    assert events == [(3, 3), (2, 3)]


def test_unsubscribe_stops_notifications(sky):
    events = []
    unsubscribe = sky.on_stars_filtered(lambda visible, total: events.append(visible))
    sky.render()
    unsubscribe()
    sky.render()
    assert events == [3]


def test_failing_callback_does_not_abort_pass(sky, caplog):
    events = []

    def broken(visible, total):
        raise RuntimeError("boom")

    sky.on_stars_filtered(broken)
    sky.on_stars_filtered(lambda visible, total: events.append(visible))
    with caplog.at_level(logging.ERROR, logger="skydome.starmap"):
        frame = sky.render()
    assert frame.visible_count == 3
    assert events == [3]
    assert "failed" in caplog.text


def test_render_is_deterministic_for_explicit_instant(sky, instant):
    assert sky.render(instant) == sky.render(instant)


def test_explicit_instant_overrides_clock(sky, instant):
    later = instant + timedelta(hours=3)
    frame = sky.render(later)
    assert frame.instant == later
    assert frame.lst != sky.render().lst


def test_catalog_is_not_mutated(sky, zenith_star):
    before = sky.stars
    sky.render()
    sky.select_at(400.0, 400.0)
    assert sky.stars == before
    assert zenith_star.ra == before[0].ra


def test_select_at_center_picks_zenith_star(sky, zenith_star):
    selected = []
    sky.on_star_selected(selected.append)
    sky.render()
    assert sky.select_at(403.0, 398.0) == zenith_star
    assert sky.selected_star == zenith_star
    assert selected == [zenith_star]
    assert sky.last_frame.selected.star == zenith_star


def test_select_at_without_prior_render_computes_frame(sky, zenith_star):
    assert sky.last_frame is None
    assert sky.select_at(400.0, 400.0) == zenith_star


def test_miss_keeps_current_selection(sky, zenith_star):
    sky.render()
    sky.select_at(400.0, 400.0)
    selected = []
    sky.on_star_selected(selected.append)
    assert sky.select_at(420.0, 200.0) is None
    assert sky.selected_star == zenith_star
    assert selected == []


def test_pointer_outside_cutoff_is_ignored(sky):
    sky.render()
    assert sky.select_at(0.0, 0.0) is None


def test_coarse_pointer_widens_hit(dome, instant, lst):
    faint = make_star("Faint", ra=lst, dec=0.0, magnitude=5.0)
    sky = StarMap([faint], dome, observer=EQUATOR, clock=lambda: instant)
    sky.render()
    # Faint stars hit at the 12 px floor; touch adds 8 px
    assert sky.select_at(400.0 + 18.0, 400.0) is None
    assert sky.select_at(400.0 + 18.0, 400.0, coarse=True) == faint


def test_clear_selection(sky, zenith_star):
    sky.render()
    sky.select(zenith_star)
    sky.clear_selection()
    assert sky.selected_star is None
    assert sky.last_frame.selected is None


def test_replacing_catalog_drops_stale_selection(sky, zenith_star, low_star):
    sky.render()
    sky.select(zenith_star)
    sky.set_catalog([low_star])
    assert sky.selected_star is None
    assert sky.last_frame.total_count == 1


def test_hover(sky):
    assert not sky.hover(400.0, 400.0)
    sky.render()
    assert sky.hover(400.0, 400.0)
    assert not sky.hover(100.0, 700.0)


def test_set_location_moves_pole(dome, instant):
    pole = make_star("Pole", ra=10.0, dec=90.0, magnitude=2.0)
    sky = StarMap([pole], dome, clock=lambda: instant)
    frame = sky.set_location(90.0, 0.0)
    assert frame.stars[0].x == pytest.approx(dome.center_x)
    assert frame.stars[0].y == pytest.approx(dome.center_y)
    frame = sky.set_location(0.0, 0.0)
    # On the horizon due North: top of the rim
    assert frame.stars[0].y == pytest.approx(dome.center_y - dome.radius, abs=1e-6)


def test_set_dome_rescales_geometry(sky, zenith_star):
    frame = sky.set_dome(DomeGeometry.from_canvas(400, 300))
    g = next(g for g in frame.stars if g.star == zenith_star)
    assert (g.x, g.y) == pytest.approx((200.0, 150.0))


def test_untransformable_star_is_skipped(dome, instant, zenith_star, caplog):
    broken = make_star("Broken", ra=math.nan, dec=0.0)
    sky = StarMap([broken, zenith_star], dome, observer=EQUATOR, clock=lambda: instant)
    with caplog.at_level(logging.WARNING, logger="skydome.starmap"):
        frame = sky.render()
    assert [g.star for g in frame.stars] == [zenith_star]
    assert "Broken" in caplog.text


def test_default_filters_hide_faint_stars(dome, instant, lst):
    faint = make_star("Faint", ra=lst, magnitude=11.0)
    sky = StarMap([faint], dome, observer=EQUATOR, filters=RangeFilter(), clock=lambda: instant)
    frame = sky.render()
    assert frame.visible_count == 0
    assert frame.stars == ()


def test_longitude_is_normalized_without_moving_stars(dome, instant, zenith_star):
    sky = StarMap([zenith_star], dome, observer=Observer(0.0, 360.0), clock=lambda: instant)
    frame = sky.render()
    assert sky.observer.longitude == 0.0
    assert frame.stars[0].x == pytest.approx(dome.center_x)

    east = sky.set_location(0.0, 270.0)
    assert sky.observer.longitude == -90.0
    west = sky.set_location(0.0, -90.0)
    assert east.lst == pytest.approx(west.lst)


@pytest.mark.parametrize(
    "latitude, longitude",
    [(0.0, math.nan), (math.nan, 0.0), (0.0, math.inf), (135.0, 0.0), (-90.5, 10.0)],
)
def test_invalid_location_keeps_previous_observer(sky, latitude, longitude):
    before = sky.render()
    with pytest.raises(InvalidCoordinateError):
        sky.set_location(latitude, longitude)
    assert sky.observer == EQUATOR
    assert sky.render() == before


@pytest.mark.parametrize("observer", [Observer(91.0, 0.0), Observer(0.0, math.nan)])
def test_invalid_initial_observer_is_rejected(dome, instant, observer):
    with pytest.raises(InvalidCoordinateError):
        StarMap([], dome, observer=observer, clock=lambda: instant)


@pytest.mark.parametrize("explicit", [True, False])
def test_select_at_fires_one_pass_notification(sky, instant, zenith_star, explicit):
    if not explicit:
        sky.render()
    events = []
    sky.on_stars_filtered(lambda visible, total: events.append((visible, total)))
    star = sky.select_at(400.0, 400.0, instant=instant if explicit else None)
    assert star == zenith_star
    assert events == [(3, 3)]


def test_star_at_has_no_side_effects(sky, instant, zenith_star):
    events = []
    sky.on_stars_filtered(lambda visible, total: events.append(visible))
    sky.on_star_selected(events.append)
    assert sky.star_at(400.0, 400.0, instant=instant) == zenith_star
    assert events == []
    assert sky.last_frame is None
    assert sky.selected_star is None


def test_missed_select_at_does_not_render(sky, instant):
    events = []
    sky.on_stars_filtered(lambda visible, total: events.append(visible))
    assert sky.select_at(420.0, 200.0, instant=instant) is None
    assert events == []


def test_filtered_out_star_is_not_hit_at_old_position(sky, zenith_star):
    sky.render()
    assert sky.star_at(400.0, 400.0) == zenith_star
    # Zenith star has magnitude 0.5; keep only fainter stars
    sky.set_range_filters(Range(2, 6), Range(0, 3000), Range(0, 15), Range(0.1, 50))
    assert sky.select_at(400.0, 400.0) is None
    assert sky.selected_star is None


def test_moved_observer_invalidates_old_position(sky, zenith_star):
    sky.render()
    sky.set_location(60.0, 0.0)
    assert sky.select_at(400.0, 400.0) is None


def test_selection_ring_survives_filter(sky, dome, zenith_star):
    sky.render()
    sky.select(zenith_star)
    frame = sky.set_range_filters(Range(2, 6), Range(0, 3000), Range(0, 15), Range(0.1, 50))
    assert zenith_star not in [g.star for g in frame.stars]
    assert frame.selected is not None
    assert frame.selected.star == zenith_star
    assert (frame.selected.x, frame.selected.y) == pytest.approx((dome.center_x, dome.center_y))
    assert sky.selected_star == zenith_star


def test_unsubscribe_is_idempotent(sky):
    events = []
    unsubscribe_filtered = sky.on_stars_filtered(lambda visible, total: events.append(visible))
    unsubscribe_selected = sky.on_star_selected(events.append)
    unsubscribe_filtered()
    unsubscribe_filtered()
    unsubscribe_selected()
    unsubscribe_selected()
    sky.render()
    assert events == []
