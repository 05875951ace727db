"""
Command-line interface for converting a service model into Kubernetes
manifests.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

from pydantic import ValidationError

from kubesynth.exceptions import (
    HealthCheckError,
    KubeSynthError,
    NetworkModeMergeError,
    OutputError,
    ServiceModelError,
    UnknownPolicyError,
    UnsupportedVariantError,
)
from kubesynth.io.file_loader import ServiceModelLoader
from kubesynth.io.manifest_writer import ManifestWriter
from kubesynth.ir.models import Controller, ConvertOptions, GroupMode, VolumeMode
from kubesynth.synthesis.transformer import Transformer


_DETAILED_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_BRIEF_FORMAT = "%(levelname)s: %(message)s"


def configure_logging(debug: bool = False, verbose: bool = False) -> None:
    """Route log records to stderr; stdout is reserved for manifests.

    `debug` turns on DEBUG everywhere. `verbose` shows INFO records from the
    synthesis passes. Without either, passes only report warnings while the
    CLI itself still reports progress.
    """
    chatty = debug or verbose
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=_DETAILED_FORMAT if chatty else _BRIEF_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    if not chatty:
        logging.getLogger().setLevel(logging.WARNING)
        logging.getLogger(__name__).setLevel(logging.INFO)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Build the `kubesynth` parser and parse `argv` (or `sys.argv`)."""
    parser = argparse.ArgumentParser(
        prog="kubesynth",
        description="Synthesize Kubernetes objects from a service model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print manifests for a model to stdout
  kubesynth convert -f services.yaml

  # One file per object, as StatefulSets
  kubesynth convert -f services.yaml -o manifests/ --controller statefulset

  # Single JSON file in a namespace
  kubesynth convert -f services.yaml -o all.json --json --namespace demo
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser("convert", help="Convert a service model")
    convert.add_argument(
        "-f",
        "--file",
        dest="model_file",
        type=Path,
        required=True,
        help="Service model file (.yaml, .yml or .json)",
    )
    convert.add_argument(
        "-o",
        "--out",
        dest="output",
        default=None,
        help="Output file, or directory (trailing '/') for one file per object; "
        "stdout when omitted",
    )
    convert.add_argument(
        "--controller",
        choices=[c.value for c in Controller if c.value],
        default="",
        help="Workload controller for every service (default: deployment, "
        "or pod for services that must not restart)",
    )
    convert.add_argument(
        "--service-group-mode",
        choices=[m.value for m in GroupMode if m.value],
        default="",
        help="Group services into shared pods by label or by shared volumes",
    )
    convert.add_argument(
        "--volumes",
        choices=[m.value for m in VolumeMode],
        default=VolumeMode.PERSISTENT_VOLUME_CLAIM.value,
        help="How declared volumes are materialized",
    )
    convert.add_argument(
        "--pvc-request-size",
        default="100Mi",
        help="Storage request of generated claims without an explicit size",
    )
    convert.add_argument(
        "--generate-network-policies",
        action="store_true",
        help="Emit a NetworkPolicy per attached network",
    )
    convert.add_argument("--namespace", default="", help="Namespace for all objects")
    convert.add_argument("-j", "--json", action="store_true", help="Emit JSON")
    convert.add_argument(
        "--indent", type=int, default=2, help="YAML/JSON indentation (default: 2)"
    )

    convert.add_argument("--debug", action="store_true", help="Enable debug logging")
    convert.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging of the synthesis passes",
    )

    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> ConvertOptions:
    """Options record for a `convert` invocation.

    Raises:
        pydantic.ValidationError: for option values out of range.
    """
    return ConvertOptions(
        controller=args.controller,
        service_group_mode=args.service_group_mode,
        generate_network_policies=args.generate_network_policies,
        volumes=args.volumes,
        pvc_request_size=args.pvc_request_size,
        namespace=args.namespace,
        generate_json=args.json,
        yaml_indent=args.indent,
    )


def run_conversion(args: argparse.Namespace) -> NoReturn:
    """Convert the model, then exit with a code that names the outcome."""
    configure_logging(args.debug, args.verbose)
    logger = logging.getLogger(__name__)

    try:
        options = build_options(args)
        model = ServiceModelLoader.load(args.model_file)
        objects = Transformer(options).transform(model)
        writer = ManifestWriter(options.generate_json, options.yaml_indent)
        written = writer.write(objects, args.output)

        logger.info(f"Synthesized {len(objects)} object(s)")
        for path in written:
            logger.info(f"  - {path}")
        sys.exit(0)

    except ValidationError as e:
        logger.error(f"Invalid options: {e}")
        sys.exit(1)
    except ServiceModelError as e:
        logger.error(f"Service model error: {e}")
        logger.info(f"Suggestion: {e.get_recovery_hint()}")
        sys.exit(1)
    except UnknownPolicyError as e:
        logger.error(f"Unknown policy: {e}")
        sys.exit(2)
    except HealthCheckError as e:
        logger.error(f"Health check error: {e}")
        sys.exit(3)
    except UnsupportedVariantError as e:
        logger.error(f"Unsupported workload: {e}")
        sys.exit(4)
    except NetworkModeMergeError as e:
        logger.error(f"Network mode merge error: {e}")
        sys.exit(5)
    except OutputError as e:
        logger.error(f"Output error: {e}")
        sys.exit(6)
    except KubeSynthError as e:
        logger.error(f"Synthesis error: {e}")
        sys.exit(7)
    except OSError as e:
        logger.error(f"File system error: {e}")
        sys.exit(8)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            logger.exception("Full traceback:")
        sys.exit(9)


def main(argv: list[str] | None = None) -> NoReturn:
    args = parse_arguments(argv)
    run_conversion(args)


if __name__ == "__main__":
    main()
