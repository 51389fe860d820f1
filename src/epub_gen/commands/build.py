"""Build command implementation."""

import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from epub_gen.core.generator import EpubGenerator

# Options the command line can override, mapped to their camelCase alias
OVERRIDABLE_OPTIONS = {
    "version": None,
    "lang": None,
    "verbose": None,
    "proxy": None,
    "strict_images": "strictImages",
}


def _resolve(base_dir: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else base_dir / path


def load_book_manifest(manifest_path: Path) -> dict[str, Any]:
    """Load a JSON book manifest into raw option data.

    Chapters may name a ``file`` (relative to the manifest) instead of
    inline ``content``; ``template`` values are template file paths.
    Relative resource paths resolve against the manifest directory.
    """
    data = json.loads(manifest_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Book manifest must be a JSON object")

    base_dir = manifest_path.parent

    if isinstance(data.get("content"), list):
        chapters = []
        for item in data["content"]:
            if isinstance(item, dict) and "file" in item:
                item = dict(item)
                chapter_file = _resolve(base_dir, item.pop("file"))
                item.setdefault("content", chapter_file.read_text(encoding="utf-8"))
            chapters.append(item)
        data["content"] = chapters

    if isinstance(data.get("template"), dict):
        data["template"] = {
            key: _resolve(base_dir, value).read_text(encoding="utf-8")
            for key, value in data["template"].items()
            if value
        }

    if "assetsDir" not in data and "assets_dir" not in data:
        data["assets_dir"] = str(base_dir)

    return data


def apply_overrides(data: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Return ``data`` with non-None command-line values applied."""
    merged = dict(data)
    for name, value in overrides.items():
        if value is None:
            continue
        alias = OVERRIDABLE_OPTIONS.get(name)
        if alias:
            merged.pop(alias, None)
        merged[name] = value
    return merged


def default_output_path(manifest_path: Path) -> Path:
    """Get default output file based on manifest filename."""
    return manifest_path.with_suffix(".epub")


def execute_build(
    manifest_path: Path,
    output_path: Path | None,
    overrides: dict[str, Any],
    templates: dict[str, Path | None],
    quiet: bool,
    console: Console,
) -> Path:
    """Execute the build command."""
    data = apply_overrides(load_book_manifest(manifest_path), overrides)

    custom = {key: path.read_text(encoding="utf-8") for key, path in templates.items() if path}
    if custom:
        data["template"] = {**(data.get("template") or {}), **custom}

    output_path = output_path or default_output_path(manifest_path)
    generator = EpubGenerator(data)

    if quiet:
        generator.generate(output_path)
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Building {output_path.name}...", total=None)
            generator.generate(output_path)

        options = generator.options
        console.print(
            Panel(
                f"[bold]{options.title}[/]\n\n"
                f"[dim]Author(s):[/] {', '.join(options.author)}\n"
                f"[dim]EPUB version:[/] {options.version}\n"
                f"[dim]Chapters:[/] {len(options.content)}\n"
                f"[dim]Output:[/] {output_path}",
                title="EPUB Created",
                border_style="green",
            )
        )

    return output_path
