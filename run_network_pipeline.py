"""
Character Encounter Network Pipeline Orchestrator

Builds, cleans and exports the character network for one book.

============================================================
EXECUTION ORDER
============================================================

1. Load the text and the character list (aliases included)
2. Build the encounter matrix (single streaming pass)
3. [Cleaning] Noise threshold (unless --skip-noise)
4. [Cleaning] Floaters from the entry point (unless --skip-floaters)
5. [Cleaning] Singletons (unless --skip-singletons)
6. Export:
   - {run_name}.matrix.csv
   - {run_name}.matrix.json.txt
   - {run_name}.edges.csv
   - {run_name}.nodes.csv        (only with --character-data)
   - {run_name}.encounters.log
   - {run_name}.cleaning.log
   - {run_name}.network.json     (full artifact)

All files land in {output_dir}/{run_name}/.

============================================================
CLI USAGE
============================================================

# Defaults (radius 15, noise 3)
python run_network_pipeline.py book.txt characters.csv --run-name got4

# Wider window, node list from a metadata table
python run_network_pipeline.py book.txt characters.csv --radius 20 \\
    --character-data character-data.csv

# Keep everything except noise
python run_network_pipeline.py book.txt characters.csv --skip-floaters --skip-singletons
"""

import os
import json
import argparse
import sys
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional
from dotenv import load_dotenv

from alias_index import AliasIndex
from character_data import load_text, load_characters, load_character_metadata
from encounter_matrix import (
    DEFAULT_RADIUS,
    PENDING_FLUSH_LIMIT,
    Encounter,
    EncounterMatrix,
)
from graph_cleaning import clean_noise, clean_floaters, clean_singletons
from network_export import (
    to_matrix_csv,
    to_matrix_json,
    to_edge_list_csv,
    to_node_list_csv,
    to_encounter_log,
)
from run_log import RunLog
load_dotenv()

# --------------------------------------------------
# Configuration
# --------------------------------------------------

# Minimum encounter count for an edge to survive noise cleaning
DEFAULT_NOISE_THRESHOLD = int(os.getenv("NETWORK_NOISE_THRESHOLD", "3"))

# Root directory for exported networks
NETWORK_OUTPUT_DIR = os.getenv("NETWORK_OUTPUT_DIR", "data/network")


# --------------------------------------------------
# Data Structures
# --------------------------------------------------

@dataclass
class NetworkSettings:
    """
    Parameters of one pipeline run. Cleaning passes run by default;
    use the skip flags to leave the raw matrix alone.
    """
    radius: int = DEFAULT_RADIUS
    noise_threshold: int = DEFAULT_NOISE_THRESHOLD
    pending_limit: int = PENDING_FLUSH_LIMIT
    entry_point: int = 0
    # None = repeat until stable
    singleton_iterations: Optional[int] = None

    skip_noise: bool = False
    skip_floaters: bool = False
    skip_singletons: bool = False


@dataclass
class CharacterNetwork:
    """JSON artifact describing a finished network."""
    run_name: str
    created_at: str
    settings: NetworkSettings
    characters: list[str]
    matrix: list[list[int]]
    total_encounters: int
    encounters: list[Encounter] = field(default_factory=list)


# --------------------------------------------------
# Build + Clean
# --------------------------------------------------

def _print_progress(position: int, total: int) -> None:
    print(f"[Encounter Matrix] Processing char {position} out of {total}")


def build_network(
    text: str,
    characters: list[str],
    alias_index: AliasIndex,
    settings: Optional[NetworkSettings] = None,
    verbose: bool = True,
) -> tuple[EncounterMatrix, RunLog]:
    """
    Build the matrix and run the enabled cleaning passes.

    Returns:
        (cleaned matrix, combined cleaning log)
    """
    if settings is None:
        settings = NetworkSettings()

    matrix = EncounterMatrix(characters, alias_index)
    matrix.build(
        text,
        settings.radius,
        progress=_print_progress if verbose else None,
        pending_limit=settings.pending_limit,
    )
    if verbose:
        print(f"[Encounter Matrix] {len(matrix.get_encounter_list())} encounters "
              f"between {matrix.size} characters")

    cleaning_log = RunLog()
    if not settings.skip_noise:
        cleaning_log.extend(clean_noise(matrix, settings.noise_threshold))
    if not settings.skip_floaters:
        cleaning_log.extend(clean_floaters(matrix, settings.entry_point))
    if not settings.skip_singletons:
        cleaning_log.extend(clean_singletons(matrix, settings.singleton_iterations))

    if verbose:
        print(f"[Graph Cleaning] {matrix.size} characters remain")
    return matrix, cleaning_log


# --------------------------------------------------
# Persistence
# --------------------------------------------------

def save_network_artifact(
    matrix: EncounterMatrix,
    settings: NetworkSettings,
    run_name: str,
    output_dir: str,
) -> str:
    """
    Save the network as a JSON artifact.

    Path: {output_dir}/{run_name}.network.json
    """
    encounters = matrix.get_encounter_list()
    network = CharacterNetwork(
        run_name=run_name,
        created_at=datetime.now(timezone.utc).isoformat(),
        settings=settings,
        characters=list(matrix.characters),
        matrix=matrix.matrix,
        total_encounters=len(encounters),
        encounters=encounters,
    )
    os.makedirs(output_dir, exist_ok=True)
    output_file = os.path.join(output_dir, f"{run_name}.network.json")
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(asdict(network), f, indent=2, ensure_ascii=False)
    return output_file


def write_network_files(
    matrix: EncounterMatrix,
    cleaning_log: RunLog,
    settings: NetworkSettings,
    run_name: str,
    output_dir: str,
    metadata: Optional[dict[str, list[str]]] = None,
) -> list[str]:
    """Write every export for a run. Returns the written paths."""
    exports = [
        (f"{run_name}.matrix.csv", to_matrix_csv(matrix)),
        (f"{run_name}.matrix.json.txt", to_matrix_json(matrix)),
        (f"{run_name}.edges.csv", to_edge_list_csv(matrix)),
        (f"{run_name}.encounters.log", to_encounter_log(matrix)),
        (f"{run_name}.cleaning.log", cleaning_log),
    ]
    if metadata is not None:
        exports.append((f"{run_name}.nodes.csv", to_node_list_csv(matrix, metadata)))

    paths = [log.save(os.path.join(output_dir, filename)) for filename, log in exports]
    paths.append(save_network_artifact(matrix, settings, run_name, output_dir))
    return paths


# --------------------------------------------------
# Pipeline Integration
# --------------------------------------------------

def run_network_pipeline(
    text_path: str,
    characters_path: str,
    run_name: str,
    settings: Optional[NetworkSettings] = None,
    character_data_path: Optional[str] = None,
    output_dir: str = NETWORK_OUTPUT_DIR,
) -> list[str]:
    """
    Load, build, clean and export one network.

    Raises:
        FileNotFoundError: If an input file is missing
    """
    if settings is None:
        settings = NetworkSettings()

    print(f"=== Building character network: {run_name} ===")
    text = load_text(text_path)
    characters, alias_index = load_characters(characters_path)
    metadata = load_character_metadata(character_data_path)
    print(f"[Pipeline] {len(text)} characters of text, "
          f"{len(characters)} characters, {len(alias_index)} aliases")
    print(f"[Pipeline] Radius: {settings.radius}, noise threshold: {settings.noise_threshold}")

    matrix, cleaning_log = build_network(text, characters, alias_index, settings)
    cleaning_log.print(prefix="[Graph Cleaning] ")

    run_dir = os.path.join(output_dir, run_name)
    paths = write_network_files(matrix, cleaning_log, settings, run_name, run_dir, metadata)
    for path in paths:
        print(f"[Export] Saved to: {path}")
    return paths


def generate_character_network(
    text_path: str,
    characters_path: str,
    run_name: str,
    settings: Optional[NetworkSettings] = None,
    character_data_path: Optional[str] = None,
    output_dir: str = NETWORK_OUTPUT_DIR,
) -> Optional[list[str]]:
    """
    NON-BLOCKING wrapper around run_network_pipeline: failures are logged
    and None is returned.
    """
    try:
        return run_network_pipeline(
            text_path,
            characters_path,
            run_name,
            settings=settings,
            character_data_path=character_data_path,
            output_dir=output_dir,
        )
    except Exception as e:
        print(f"[Pipeline] ⚠️ Failed to build network: {e}")
        return None


# --------------------------------------------------
# Command-Line Interface
# --------------------------------------------------

def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Character Encounter Network - build a weighted character graph from a text",
    )
    parser.add_argument("text_file", help="Narrative text file")
    parser.add_argument("characters_file", help="Character list CSV (name, aliases...)")
    parser.add_argument(
        "--run-name",
        default="network",
        help="Name used for the output directory and files",
    )
    parser.add_argument(
        "--output-dir",
        default=NETWORK_OUTPUT_DIR,
        help=f"Root output directory (default: {NETWORK_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--character-data",
        default=None,
        help="Character metadata CSV for the node list export",
    )

    build_group = parser.add_argument_group("Construction")
    build_group.add_argument("--radius", type=int, default=DEFAULT_RADIUS,
                             help=f"Word radius (default: {DEFAULT_RADIUS})")
    build_group.add_argument("--pending-limit", type=int, default=PENDING_FLUSH_LIMIT,
                             help=f"Pending buffer drain threshold (default: {PENDING_FLUSH_LIMIT})")

    clean_group = parser.add_argument_group("Cleaning")
    clean_group.add_argument("--noise", type=int, default=DEFAULT_NOISE_THRESHOLD,
                             help=f"Noise threshold (default: {DEFAULT_NOISE_THRESHOLD})")
    clean_group.add_argument("--entry-point", type=int, default=0,
                             help="Character slot the floater search starts from")
    clean_group.add_argument("--singleton-iterations", type=int, default=None,
                             help="Fixed number of singleton rounds (default: until stable)")
    clean_group.add_argument("--skip-noise", action="store_true", help="Skip noise cleaning")
    clean_group.add_argument("--skip-floaters", action="store_true", help="Skip floater cleaning")
    clean_group.add_argument("--skip-singletons", action="store_true", help="Skip singleton cleaning")

    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> NetworkSettings:
    return NetworkSettings(
        radius=args.radius,
        noise_threshold=args.noise,
        pending_limit=args.pending_limit,
        entry_point=args.entry_point,
        singleton_iterations=args.singleton_iterations,
        skip_noise=args.skip_noise,
        skip_floaters=args.skip_floaters,
        skip_singletons=args.skip_singletons,
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    paths = generate_character_network(
        args.text_file,
        args.characters_file,
        args.run_name,
        settings=settings_from_args(args),
        character_data_path=args.character_data,
        output_dir=args.output_dir,
    )
    if paths is None:
        print("\n✗ Character network generation failed")
        return 1
    print(f"\n✓ Character network generated: {len(paths)} files")
    return 0


if __name__ == "__main__":
    sys.exit(main())
