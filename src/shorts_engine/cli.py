"""
Shorts Engine - command line entry point
Renders vertical short videos from a script, a narration track and stock footage.
"""

import argparse
import asyncio
import re
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from .automation.short_pipeline import PipelineResult, ShortsPipeline
from .automation.uploader import BackendUploader
from .content_generation.file_providers import PcmFileSynthesizer, StaticScriptProvider
from .errors import ShortsEngineError
from .media_generation.stock_footage import PexelsFootageProvider, StaticFootageProvider
from .utils.config import Config
from .utils.logger import setup_logging
from .video_assembly.frame_clock import CancellationToken
from .video_assembly.video_assembler import ShortVideoAssembler

console = Console()

PERCENT_PATTERN = re.compile(r"(\d+)%")


def _slugify(title: str) -> str:
    slug = re.sub(r"[^\w]+", "_", title.lower(), flags=re.UNICODE).strip("_")
    return slug[:60] or "short"


class ShortsSystem:
    """Wires configuration, logging and the pipeline for CLI runs"""

    def __init__(self, config_path: Optional[str] = None, realtime: bool = False):
        if config_path and Path(config_path).exists():
            self.config = Config.load(config_path)
        else:
            if config_path:
                console.print(f"[yellow]⚠[/yellow] Config {config_path} not found, using defaults")
            self.config = Config()
        self.config.apply_environment()

        if realtime:
            self.config.render.realtime = True

        self.logger = setup_logging(
            self.config,
            console_handler=RichHandler(console=console, show_path=False)
        )
        self.cancel_token = CancellationToken()

    def build_pipeline(self,
                       script_path: str,
                       narration_path: str,
                       clips: Optional[List[str]] = None,
                       upload: bool = False) -> ShortsPipeline:
        if clips:
            footage_provider = StaticFootageProvider(clips)
        else:
            footage_provider = PexelsFootageProvider(self.config.footage)

        return ShortsPipeline(
            script_provider=StaticScriptProvider(Path(script_path)),
            narration_synthesizer=PcmFileSynthesizer(Path(narration_path)),
            footage_provider=footage_provider,
            assembler=ShortVideoAssembler(self.config),
            uploader=BackendUploader(self.config.upload) if upload else None
        )

    async def render_short(self,
                           script_path: str,
                           narration_path: str,
                           clips: Optional[List[str]] = None,
                           output_path: Optional[str] = None,
                           upload: bool = False) -> PipelineResult:
        """Render one short and write it to disk"""
        pipeline = self.build_pipeline(script_path, narration_path, clips, upload)
        console.print("[blue]🎬[/blue] Starting short render...")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console,
            refresh_per_second=4,
            transient=False
        ) as progress:
            task = progress.add_task("[cyan]Preparing...", total=100)

            def on_progress(message: str):
                match = PERCENT_PATTERN.search(message)
                if match:
                    progress.update(task, completed=int(match.group(1)), description=f"[magenta]🎞️ {message}")
                else:
                    progress.update(task, description=f"[cyan]{message}")

            result = await pipeline.run(
                niche="offline",
                progress_callback=on_progress,
                cancel_token=self.cancel_token,
                upload=upload
            )
            progress.update(task, completed=100)

        render = result.render.raise_for_outcome()
        if not render.success:
            console.print(f"[yellow]⏹️[/yellow] Render {render.outcome.value} after {render.frames_rendered} frames")
            return result

        if output_path:
            output_file = Path(output_path)
        else:
            output_file = Path(self.config.paths.output) / f"{_slugify(result.script.title)}.{render.container}"
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_bytes(render.video_bytes)

        console.print("\n[bold green]🎉 Short Complete![/bold green]")
        console.print(f"[green]🎬[/green] Duration: {render.total_duration:.1f}s, {render.frames_rendered} frames")
        console.print(f"[green]🖼️[/green] Clips used: {render.clips_loaded}, captions: {render.captions}")
        console.print(f"[green]🎵[/green] Background music: {'yes' if render.music_loaded else 'no'}")
        console.print(f"[green]⏱️[/green] Render time: {render.render_time_seconds:.1f}s")
        console.print(f"[green]✅[/green] Video saved: {output_file}")
        for warning in render.warnings:
            console.print(f"[yellow]⚠[/yellow] {warning}")
        if result.uploaded:
            console.print(f"[green]📤[/green] Upload response: {result.upload_response}")

        return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Shorts Engine - vertical short video renderer")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Render a short from a script and narration")
    render.add_argument("--script", required=True, help="Script JSON file")
    render.add_argument("--narration", required=True, help="Raw s16le mono PCM narration file")
    render.add_argument("--clip", action="append", dest="clips", default=None,
                        help="Clip URL or path (repeatable); defaults to a stock footage search")
    render.add_argument("--output", type=str, help="Output video path")
    render.add_argument("--upload", action="store_true", help="Upload the finished video")
    render.add_argument("--config", type=str, default="configs/config.yaml",
                        help="Path to configuration file")
    render.add_argument("--realtime", action="store_true",
                        help="Pace frames on the wall clock instead of stepping")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    load_dotenv(dotenv_path=Path.cwd() / ".env.local")
    args = build_parser().parse_args(argv)

    try:
        system = ShortsSystem(args.config, realtime=args.realtime)
        if args.command == "render":
            asyncio.run(system.render_short(
                args.script, args.narration, args.clips, args.output, args.upload
            ))
        return 0
    except KeyboardInterrupt:
        console.print("\n[yellow]👋[/yellow] Interrupted")
        return 130
    except ShortsEngineError as e:
        console.print(f"[red]❌[/red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
