"""Star map engine: owns catalog, observer, filters and selection, and runs the per-frame pipeline."""

import logging
import math
from datetime import datetime
from typing import Callable, Iterable

from pytz import utc

from skydome import appearance
from skydome.compute import (
    RENDER_CUTOFF,
    InvalidCoordinateError,
    local_sidereal_time,
    project_star,
    to_utc,
)
from skydome.filtering import filter_stars
from skydome.models import (
    DomeGeometry,
    FrameGeometry,
    HorizontalCoords,
    Observer,
    ProjectedStar,
    Range,
    RangeFilter,
    Star,
    StarGeometry,
)
from skydome.selection import TOUCH_HIT_PADDING, find_at, is_over_star

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
StarsFilteredCallback = Callable[[int, int], None]
StarSelectedCallback = Callable[[Star], None]

DEFAULT_OBSERVER = Observer(latitude=59.3293, longitude=18.0686)  # Stockholm


def system_clock() -> datetime:
    return datetime.now(utc)


def _checked_observer(observer: Observer) -> Observer:
    """Validate an observer location and fold its longitude into [-180, 180).

    Raises:
        InvalidCoordinateError: On a non-finite value or a latitude outside [-90, 90].
    """
    for label, value in (("latitude", observer.latitude), ("longitude", observer.longitude)):
        if not math.isfinite(value):
            raise InvalidCoordinateError(f"{label} is not finite: {value!r}")
    if not -90 <= observer.latitude <= 90:
        raise InvalidCoordinateError(f"latitude outside [-90, 90]: {observer.latitude}")
    return observer.normalized()


def _discard(callbacks: list, callback) -> None:
    if callback in callbacks:
        callbacks.remove(callback)


class StarMap:
    """Sky dome for one observer.

    Each setter triggers a fresh render pass. Frames are immutable; the last
    one is kept only so pointer queries hit-test against what was drawn.
    """

    def __init__(
        self,
        stars: Iterable[Star],
        dome: DomeGeometry,
        observer: Observer | None = None,
        filters: RangeFilter | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._stars: tuple[Star, ...] = tuple(stars)
        self._dome = dome
        self._observer = _checked_observer(observer or DEFAULT_OBSERVER)
        self._filters = filters or RangeFilter()
        self._clock = clock or system_clock
        self._selected: Star | None = None
        self._last_frame: FrameGeometry | None = None
        self._filtered_callbacks: list[StarsFilteredCallback] = []
        self._selected_callbacks: list[StarSelectedCallback] = []

    # --- state -----------------------------------------------------------

    @property
    def stars(self) -> tuple[Star, ...]:
        return self._stars

    @property
    def observer(self) -> Observer:
        return self._observer

    @property
    def filters(self) -> RangeFilter:
        return self._filters

    @property
    def dome(self) -> DomeGeometry:
        return self._dome

    @property
    def selected_star(self) -> Star | None:
        return self._selected

    @property
    def last_frame(self) -> FrameGeometry | None:
        return self._last_frame

    def set_catalog(self, stars: Iterable[Star], instant: datetime | None = None) -> FrameGeometry:
        self._stars = tuple(stars)
        if self._selected is not None and self._selected not in self._stars:
            self._selected = None
        return self.render(instant)

    def set_location(
        self, latitude: float, longitude: float, instant: datetime | None = None
    ) -> FrameGeometry:
        self._observer = _checked_observer(Observer(latitude=latitude, longitude=longitude))
        return self.render(instant)

    def set_range_filters(
        self,
        magnitude: Range,
        distance: Range,
        age: Range,
        mass: Range,
        instant: datetime | None = None,
    ) -> FrameGeometry:
        self._filters = RangeFilter(
            magnitude=magnitude, distance=distance, age=age, mass=mass
        )
        return self.render(instant)

    def set_dome(self, dome: DomeGeometry, instant: datetime | None = None) -> FrameGeometry:
        self._dome = dome
        return self.render(instant)

    def visible_stars(self) -> tuple[Star, ...]:
        f = self._filters
        return filter_stars(self._stars, f.magnitude, f.distance, f.age, f.mass)

    # --- notifications ---------------------------------------------------

    def on_stars_filtered(self, callback: StarsFilteredCallback) -> Callable[[], None]:
        """Register ``callback(visible_count, total_count)``; returns an unsubscribe function."""
        self._filtered_callbacks.append(callback)
        return lambda: _discard(self._filtered_callbacks, callback)

    def on_star_selected(self, callback: StarSelectedCallback) -> Callable[[], None]:
        """Register ``callback(star)``; returns an unsubscribe function."""
        self._selected_callbacks.append(callback)
        return lambda: _discard(self._selected_callbacks, callback)

    def _notify(self, callbacks: list, *args) -> None:
        for callback in list(callbacks):
            try:
                callback(*args)
            except Exception:
                logger.exception("Callback %r failed", callback)

    # --- pipeline --------------------------------------------------------

    def compute_frame(self, instant: datetime | None = None) -> FrameGeometry:
        """Run filter → transform → project for every visible star, without side effects.

        Args:
            instant: Moment to compute for. Defaults to the injected clock.

        Returns:
            FrameGeometry with drawable stars in catalog order.
        """
        when = to_utc(instant if instant is not None else self._clock())
        observer = self._observer
        dome = self._dome
        visible = self.visible_stars()
        lst = local_sidereal_time(when, observer.longitude)

        geometries: list[StarGeometry] = []
        projected: list[ProjectedStar] = []
        selected_geometry: StarGeometry | None = None
        for star in visible:
            try:
                p, coords = project_star(star, observer, lst, dome)
            except InvalidCoordinateError as exc:
                logger.warning("Cannot place star %s: %s", star.name or star.id, exc)
                continue
            if not dome.contains(p.x, p.y, RENDER_CUTOFF):
                continue
            geometry = self._geometry(p, coords)
            geometries.append(geometry)
            projected.append(p)
            if star == self._selected:
                selected_geometry = geometry

        if self._selected is not None and selected_geometry is None:
            # Selection stays marked while the filter hides the star
            selected_geometry = self._hidden_selection(observer, lst, dome)

        logger.debug(
            "Frame at %s: lst=%.3f, %d/%d filtered, %d drawable",
            when.isoformat(),
            lst,
            len(visible),
            len(self._stars),
            len(geometries),
        )
        return FrameGeometry(
            instant=when,
            observer=observer,
            dome=dome,
            lst=lst,
            stars=tuple(geometries),
            projected=tuple(projected),
            visible_count=len(visible),
            total_count=len(self._stars),
            selected=selected_geometry,
        )

    def _geometry(self, p: ProjectedStar, coords: HorizontalCoords) -> StarGeometry:
        star = p.star
        return StarGeometry(
            star=star,
            x=p.x,
            y=p.y,
            altitude=coords.altitude,
            azimuth=coords.azimuth,
            color=appearance.color_for(star.spectral_class),
            alpha=appearance.alpha_for(coords.altitude),
            size=appearance.star_size(star.magnitude),
            glow_radius=appearance.glow_radius(star.magnitude),
            show_label=appearance.show_label(star, self._selected),
        )

    def _hidden_selection(
        self, observer: Observer, lst: float, dome: DomeGeometry
    ) -> StarGeometry | None:
        try:
            p, coords = project_star(self._selected, observer, lst, dome)
        except InvalidCoordinateError:
            return None
        return self._geometry(p, coords)

    def render(self, instant: datetime | None = None) -> FrameGeometry:
        """Compute a frame, keep it for hit-testing, and fire ``stars_filtered``."""
        frame = self.compute_frame(instant)
        self._last_frame = frame
        self._notify(self._filtered_callbacks, frame.visible_count, frame.total_count)
        return frame

    # --- selection -------------------------------------------------------

    def _frame_for_hit_test(self, instant: datetime | None) -> FrameGeometry:
        # A fresh frame is only hit-tested, never stored or announced
        if instant is not None or self._last_frame is None:
            return self.compute_frame(instant)
        return self._last_frame

    def _hit(
        self, x: float, y: float, coarse: bool, instant: datetime | None
    ) -> tuple[Star | None, FrameGeometry | None]:
        if not self._dome.contains(x, y, RENDER_CUTOFF):
            return None, None
        frame = self._frame_for_hit_test(instant)
        padding = TOUCH_HIT_PADDING if coarse else 0.0
        return find_at((x, y), frame.projected, padding=padding), frame

    def star_at(
        self,
        x: float,
        y: float,
        coarse: bool = False,
        instant: datetime | None = None,
    ) -> Star | None:
        """Return the star under the pointer. No state changes and no notifications."""
        star, _ = self._hit(x, y, coarse, instant)
        return star

    def select_at(
        self,
        x: float,
        y: float,
        coarse: bool = False,
        instant: datetime | None = None,
    ) -> Star | None:
        """Select the star under a pointer, if any.

        Args:
            x, y: Pointer position in pixels.
            coarse: Touch-style input; widens every hit circle by TOUCH_HIT_PADDING.
            instant: Hit-test a frame computed for this moment. By default the
                last rendered frame is used. A hit renders exactly once.

        Returns:
            The selected star, or None when nothing is under the pointer (the
            current selection is then left unchanged).
        """
        star, frame = self._hit(x, y, coarse, instant)
        if star is not None:
            self.select(star, instant=frame.instant)
        return star

    def select(self, star: Star, instant: datetime | None = None) -> None:
        self._selected = star
        self.render(instant if instant is not None else self._last_instant())
        self._notify(self._selected_callbacks, star)

    def clear_selection(self) -> None:
        self._selected = None
        if self._last_frame is not None:
            self.render(self._last_frame.instant)

    def hover(self, x: float, y: float) -> bool:
        """True if the pointer is over a drawn star in the last frame."""
        if self._last_frame is None:
            return False
        return is_over_star((x, y), self._last_frame.projected)

    def _last_instant(self) -> datetime | None:
        return self._last_frame.instant if self._last_frame is not None else None
