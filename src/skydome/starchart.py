"""Command-line entry point for sky dome charts.

    skydome chart stars.json --when "2024-08-12 23:30" -o chart.png
    skydome select stars.json 412 230 --when "2024-08-12 23:30"
"""

import logging
from datetime import datetime
from pathlib import Path

import click
from dotenv import find_dotenv, load_dotenv

from skydome.catalog import CatalogError, load_catalog
from skydome.config import ConfigError, load_settings
from skydome.models import DomeGeometry, Observer, Range, RangeFilter
from skydome.starmap import StarMap
from skydome.timeutil import TimezoneLookupError, local_to_utc

logger = logging.getLogger(__name__)


def _range(value: tuple[float, float] | None, default: Range) -> Range:
    return Range(*value) if value else default


def _build_map(ctx: click.Context, catalog_path: Path, lat, lon, when, mag, dist, age, mass):
    settings = ctx.obj["settings"]
    latitude = settings.latitude if lat is None else lat
    longitude = settings.longitude if lon is None else lon

    try:
        report = load_catalog(catalog_path)
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc
    if report.rejected:
        click.echo(f"Skipped {len(report.rejected)} malformed record(s)", err=True)

    if when is None:
        instant = datetime.now().astimezone()
    else:
        try:
            instant = local_to_utc(when, latitude, longitude)
        except (ValueError, TimezoneLookupError) as exc:
            raise click.BadParameter(str(exc), param_hint="--when") from exc

    defaults = RangeFilter()
    filters = RangeFilter(
        magnitude=_range(mag, defaults.magnitude),
        distance=_range(dist, defaults.distance),
        age=_range(age, defaults.age),
        mass=_range(mass, defaults.mass),
    )
    dome = DomeGeometry.from_canvas(settings.canvas_width, settings.canvas_height)
    sky = StarMap(
        report.stars,
        dome,
        observer=Observer(latitude=latitude, longitude=longitude),
        filters=filters,
        clock=lambda: instant,
    )
    sky.on_stars_filtered(
        lambda visible, total: click.echo(f"{visible} of {total} stars match the filters")
    )
    return sky


def _common_options(f):
    options = [
        click.argument("catalog", type=click.Path(exists=True, dir_okay=False, path_type=Path)),
        click.option("--lat", type=click.FloatRange(-90, 90), help="Observer latitude (default: SKYDOME_LATITUDE)"),
        click.option("--lon", type=float, help="Observer longitude, east positive (default: SKYDOME_LONGITUDE)"),
        click.option("--when", help='Local time at the observer, "YYYY-MM-DD HH:MM" (default: now)'),
        click.option("--mag", nargs=2, type=float, help="Magnitude range MIN MAX"),
        click.option("--dist", nargs=2, type=float, help="Distance range MIN MAX (light-years)"),
        click.option("--age", nargs=2, type=float, help="Age range MIN MAX (billions of years)"),
        click.option("--mass", nargs=2, type=float, help="Mass range MIN MAX (solar masses)"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


@click.group()
@click.version_option(version="0.1.0")
@click.pass_context
def main(ctx: click.Context):
    """Sky dome star charts for an observer, place and time."""
    load_dotenv(find_dotenv(usecwd=True))
    try:
        settings = load_settings(dotenv=False)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = {"settings": settings}


@main.command()
@_common_options
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Output path (.png or .html)")
@click.pass_context
def chart(ctx, catalog, lat, lon, when, mag, dist, age, mass, output):
    """Render a sky dome chart to PNG (matplotlib) or HTML (plotly)."""
    sky = _build_map(ctx, catalog, lat, lon, when, mag, dist, age, mass)
    frame = sky.render()
    settings = ctx.obj["settings"]

    if output is not None and output.suffix.lower() == ".html":
        from skydome.renderers.plotly_2d import render_plotly_chart

        fig = render_plotly_chart(frame, settings.canvas_width, settings.canvas_height)
        output.parent.mkdir(parents=True, exist_ok=True)
        fig.write_html(str(output), config=fig._config)  # type: ignore[attr-defined]
        path = output
    else:
        from skydome.renderers.static import save_static_chart

        path = save_static_chart(frame, output, settings.canvas_width, settings.canvas_height)
    click.echo(f"Saved: {path}")


@main.command()
@_common_options
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.option("--touch", is_flag=True, help="Use the wider touch hit tolerance")
@click.pass_context
def select(ctx, catalog, lat, lon, when, mag, dist, age, mass, x, y, touch):
    """Report the star under pixel position X Y."""
    sky = _build_map(ctx, catalog, lat, lon, when, mag, dist, age, mass)
    sky.on_star_selected(lambda star: logger.info("Selected %s", star.name))
    sky.render()
    star = sky.select_at(x, y, coarse=touch)
    if star is None:
        click.echo("No star at that position")
        return
    frame = sky.last_frame
    geometry = frame.selected if frame is not None else None
    click.echo(f"{star.name} [{star.spectral_class}] mag {star.magnitude:g}, {star.distance:g} ly")
    if geometry is not None:
        click.echo(f"alt {geometry.altitude:.2f}°, az {geometry.azimuth:.2f}°")


if __name__ == "__main__":
    main()
