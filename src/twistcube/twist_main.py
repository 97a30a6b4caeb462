import argparse
import logging
import sys
from typing import List

from datatrees import datatree, dtfield

from twistcube.config import MAXSTEPS, TwistConfig
from twistcube.entity import TwistCubeException
from twistcube.session import TwistCubeSession


log = logging.getLogger(__name__)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


def add_bool_arg(parser, name, help_text, default=False):
    dest = name.replace('-', '_')
    parser.add_argument(f"--{name}", action="store_true", dest=dest, help=help_text)
    parser.add_argument(
        f"--no-{name}", action="store_false", dest=dest, help=f"Disable: {help_text}")
    parser.set_defaults(**{dest: default})


def positive_int(value: str) -> int:
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return ivalue


@datatree
class TwistMainRunner:
    """Parses arguments, builds a TwistCube and clicks it."""
    argv: List[str] | None = None
    _args: argparse.Namespace | None = dtfield(default=None, init=False)
    parser: argparse.ArgumentParser | None = dtfield(
        self_default=lambda s: s._make_parser(), init=False)
    session: TwistCubeSession | None = dtfield(default=None, init=False)
    default_size: int = 100
    default_clicks: int = 1
    default_stl: bool = False
    default_output_base: str = 'twistcube'
    default_log_level: str = 'WARNING'

    @property
    def args(self) -> argparse.Namespace:
        if self._args is None:
            self.parse_args()
        return self._args

    def _make_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="twistcube",
            description="Build a TwistCube and click it with the Interact tool.")

        # --- Model ---
        parser.add_argument(
            "--size", type=positive_int, default=self.default_size,
            help="Edge length of the cube.")
        parser.add_argument(
            "--steps", type=positive_int, default=MAXSTEPS,
            help="Number of copies in a full spiral.")

        # --- Interaction ---
        parser.add_argument(
            "--clicks", type=int, default=self.default_clicks,
            help="Interact clicks. Odd clicks grow the spiral, even clicks unwind it.")
        parser.add_argument(
            "--frames", type=positive_int, default=None,
            help="Maximum frames to play after each click. Plays to completion by default.")

        # --- Output ---
        add_bool_arg(parser, "stl", "Export the final model to an STL file.", default=self.default_stl)
        parser.add_argument(
            "--output-base", type=str, default=self.default_output_base,
            help="Base name for output files.")
        parser.add_argument(
            "--log-level", choices=LOG_LEVELS, default=self.default_log_level,
            help="Logging level.")
        return parser

    def parse_args(self):
        self._args = self.parser.parse_args(self.argv)

    def run(self) -> int:
        args = self.args
        logging.basicConfig(level=getattr(logging, args.log_level))

        config = TwistConfig(max_steps=args.steps)
        self.session = TwistCubeSession.create(config)
        if args.size != self.session.size:
            self.session.set_size(args.size)

        for click in range(args.clicks):
            updates = self.session.click()
            frames = self.session.play(args.frames)
            print(f"Click {click + 1}: {updates} -> {frames} frames, "
                  f"{len(self.session.copies)} copies")

        if args.stl:
            filename = f"{args.output_base}.stl"
            triangles = self.session.export_stl(filename, update_normals=False)
            print(f"Exported STL: {filename} ({triangles} triangles)")
        return 0


def main(argv: List[str] | None = None) -> int:
    runner = TwistMainRunner(argv)
    try:
        return runner.run()
    except TwistCubeException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
