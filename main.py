"""
imagetest CLI
=============
Run image scenarios outside of a test runner.

Usage:
  python main.py run --builder-image ruby-22-centos7 --source https://example/app \
      --output-image app-test [--context-dir sub/dir] [--reuse-images]
  python main.py manifest scenarios.yaml [--reuse-images]

Exit status is 0 when every scenario passed, 1 otherwise.
"""
import argparse
import logging
import sys

from imagetest.core.config import ScenarioConfig
from imagetest.core.errors import ImageTestError
from imagetest.parser.scenario_manifest import load_manifest
from imagetest.scenario.image_scenario import verify_image_from_source
from imagetest.utils.logging_config import setup_logging

logger = logging.getLogger("main")


def _run_one(name: str, config: ScenarioConfig, **kwargs) -> bool:
    try:
        result = verify_image_from_source(config=config, raise_on_failure=False, **kwargs)
    except ImageTestError as e:
        logger.error("Scenario %s aborted: %s", name, e)
        return False

    for failure in result.failures:
        logger.error("Scenario %s: %s", name, failure)
    logger.info("Scenario %s: %s", name, "PASSED" if result.passed else "FAILED")
    return result.passed


def cmd_run(args: argparse.Namespace, config: ScenarioConfig) -> int:
    passed = _run_one(
        args.output_image,
        config,
        builder_image=args.builder_image,
        source=args.source,
        context_dir=args.context_dir,
        output_image=args.output_image,
    )
    return 0 if passed else 1


def cmd_manifest(args: argparse.Namespace, config: ScenarioConfig) -> int:
    try:
        manifest = load_manifest(args.path)
    except ImageTestError as e:
        logger.error("%s", e)
        return 1

    results: dict[str, bool] = {}
    for spec in manifest.scenarios:
        results[spec.display_name] = _run_one(
            spec.display_name,
            config,
            builder_image=spec.builder_image,
            source=spec.source,
            context_dir=spec.context_dir,
            output_image=spec.output_image,
            output_check=spec.output_check(runtime=config.container_runtime),
            extra_checks=spec.extra_checks(runtime=config.container_runtime),
        )

    failed = [name for name, passed in results.items() if not passed]
    logger.info("%d/%d scenario(s) passed", len(results) - len(failed), len(results))
    return 1 if failed else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build, run and verify application images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--reuse-images", action="store_true",
        help="Skip builds and reuse existing output images",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-dir", default=None, help="Also write a daily log file here")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_p = subparsers.add_parser("run", help="Run a single scenario")
    run_p.add_argument("--builder-image", required=True)
    run_p.add_argument("--source", required=True)
    run_p.add_argument("--context-dir", default="")
    run_p.add_argument("--output-image", required=True)
    run_p.set_defaults(handler=cmd_run)

    manifest_p = subparsers.add_parser("manifest", help="Run every scenario in a YAML manifest")
    manifest_p.add_argument("path")
    manifest_p.set_defaults(handler=cmd_manifest)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_dir=args.log_dir)

    config = ScenarioConfig.from_env()
    if args.reuse_images:
        config = config.with_overrides(reuse_images=True)

    return args.handler(args, config)


if __name__ == "__main__":
    sys.exit(main())
