# multipath/services/examples.py
"""Starter catalog for a fresh studio: five paths, one of each child per path."""
from multipath.schemas import (
    Container, EntryPoint, GlobalScope, Limit, Path, PathScope, StudioData, StudioSettings,
)

EXAMPLE_PATHS = [
    Path(id="p-writing", name="Writing", color="#6b7280", weekly_target=1),
    Path(id="p-visual", name="Visual", color="#0ea5e9", weekly_target=1),
    Path(id="p-music", name="Music", color="#22c55e", weekly_target=1),
    Path(id="p-tech", name="Tech", color="#eab308", weekly_target=1),
    Path(id="p-brand", name="Brand", color="#ef4444", weekly_target=1),
]

EXAMPLE_CONTAINERS = [
    Container(id="c-writing-tile", path_id="p-writing", name="Tile 300–500 words",
              description="Write 300–500 words around a vivid beat."),
    Container(id="c-visual-a5", path_id="p-visual", name="A5 sketch",
              description="One A5 frame with a clear focal point."),
    Container(id="c-music-songlet", path_id="p-music", name="Songlet — 60–90 sec",
              description="3-section sketch: drums(8) + bass(8) + hook(8)."),
    Container(id="c-tech-demo", path_id="p-tech", name="Demo spike",
              description="Prototype one interaction in 120 minutes."),
    Container(id="c-brand-waistband", path_id="p-brand", name="Waistband concept",
              description="Name + single visual for a micro-brand."),
]

EXAMPLE_ENTRY_POINTS = [
    EntryPoint(id="e-writing-frag", path_id="p-writing", name="Fragment sweep 10 min",
               description="Free-write fragments for 10 minutes."),
    EntryPoint(id="e-visual-transfer", path_id="p-visual", name="Transfer rip",
               description="Trace a photo for 5 minutes, then remix."),
    EntryPoint(id="e-music-mimic", path_id="p-music", name="Mimic 45s",
               description="Sing along a similar mood track, then record first take."),
    EntryPoint(id="e-tech-openproj", path_id="p-tech", name="Open project",
               description="Open a dusty repo, make one visible win."),
    EntryPoint(id="e-brand-flatlay", path_id="p-brand", name="Flatlay scan",
               description="Collect 5 artifacts, sketch the brand feel."),
]

EXAMPLE_LIMITS = [
    Limit(id="l-global-delete10", scope=GlobalScope(), name="Delete last 10%"),
    Limit(id="l-writing-no-adv", scope=PathScope(path_id="p-writing"), name="No adverbs"),
    Limit(id="l-visual-3colors", scope=PathScope(path_id="p-visual"), name="Use max 3 colors"),
    Limit(id="l-music-92bpm", scope=PathScope(path_id="p-music"), name="92 BPM"),
    Limit(id="l-tech-120min", scope=PathScope(path_id="p-tech"), name="120-min cap"),
    Limit(id="l-brand-5plus5", scope=PathScope(path_id="p-brand"), name="5+5 brainstorm"),
]


def example_studio(settings: StudioSettings | None = None) -> StudioData:
    return StudioData(
        paths=list(EXAMPLE_PATHS),
        containers=list(EXAMPLE_CONTAINERS),
        entry_points=list(EXAMPLE_ENTRY_POINTS),
        limits=list(EXAMPLE_LIMITS),
        prompts=[],
        logs=[],
        settings=settings or StudioSettings(dark_mode="light"),
    )
