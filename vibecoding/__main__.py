import argparse
import logging
import os
import typing

import yaml

import vibecoding.engine
import vibecoding.output


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config.yaml"


def load_config (config_path: str = DEFAULT_CONFIG_PATH) -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def build_parser () -> argparse.ArgumentParser:

	parser = argparse.ArgumentParser(prog="vibecoding", description="Procedural bass, pad, arp and drum loops over MIDI.")

	parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="YAML config file (default: %(default)s)")
	parser.add_argument("--style", help="Style preset, e.g. techno, house, lofi")
	parser.add_argument("--scale", help="Scale, e.g. 'A minor' or 'F# dorian'")
	parser.add_argument("--bpm", type=float, help="Tempo (default: chosen from the style's range)")
	parser.add_argument("--seed", type=int, help="Random seed for repeatable output")
	parser.add_argument("--render", type=int, metavar="BARS", help="Render BARS bars to a MIDI file instead of playing")
	parser.add_argument("--output", metavar="FILE", help="Filename for --render")
	parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")

	return parser


def resolve_settings (config: dict, args: argparse.Namespace) -> typing.Dict[str, typing.Any]:

	"""
	Merge the config file with command-line flags (flags win).
	"""

	engine_config = config.get('engine', {}) or {}
	render_config = config.get('render', {}) or {}
	midi_config = config.get('midi', {}) or {}

	def pick (flag: typing.Any, key: str, default: typing.Any) -> typing.Any:
		return flag if flag is not None else engine_config.get(key, default)

	return {
		"device_name": midi_config.get('device_name'),
		"scale": pick(args.scale, 'scale', "C major"),
		"style": pick(args.style, 'style', "techno"),
		"bpm": pick(args.bpm, 'bpm', None),
		"seed": pick(args.seed, 'seed', None),
		"fade_time": engine_config.get('fade_time', 2.0),
		"volumes": engine_config.get('volumes', {}) or {},
		"master_volume": engine_config.get('master_volume', 1.0),
		"render_bars": args.render if args.render is not None else render_config.get('bars'),
		"render_filename": args.output or render_config.get('filename', "render.mid"),
	}


def main (argv: typing.Optional[typing.Sequence[str]] = None) -> None:

	"""
	Main entry point for the vibecoding application.
	"""

	args = build_parser().parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	logger.info("VibeCoding starting...")

	settings = resolve_settings(load_config(args.config), args)
	rendering = settings["render_bars"] is not None

	output = vibecoding.output.MidiOutput(
		device_name = settings["device_name"],
		open_device = not rendering
	)

	engine = vibecoding.engine.Engine(
		output = output,
		scale = settings["scale"],
		style = settings["style"],
		bpm = settings["bpm"],
		seed = settings["seed"],
		fade_time = settings["fade_time"],
		volumes = settings["volumes"],
		master_volume = settings["master_volume"]
	)

	if rendering:
		engine.render(bars=settings["render_bars"], filename=settings["render_filename"])
	else:
		engine.play()


if __name__ == "__main__":
	main()
