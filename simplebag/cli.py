"""
the command-line interface to simplebag.

Each DIRECTORY given is converted into a bag, in place; with --validate,
each is instead validated as an existing bag.  All directories are
processed even if an earlier one fails; the exit status is 1 if any of them
failed and 2 if the command-line arguments were not usable.
"""
import logging

import click

from .constants import VERSION, DEFAULT_ALGORITHMS, RECOGNIZED_INFO_TAGS
from .digest import SUPPORTED_ALGORITHMS
from .make import make_bag
from .validate.bag import validate_bag, ValidationMode
from .validate.base import ERROR, WARN, PROB
from .exceptions import BagError

LOGGER = logging.getLogger("simplebag")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

def _option_name(tag):
    return tag.lower().replace('-', '_')

def algorithm_options(func):
    """
    add a boolean flag for each supported checksum algorithm
    """
    for alg in reversed(SUPPORTED_ALGORITHMS):
        func = click.option("--"+alg, alg, is_flag=True,
                            help="Generate %s manifest when creating a bag" %
                                 alg)(func)
    return func

def metadata_options(func):
    """
    add an option for each recognized bag-info.txt tag
    """
    for tag in reversed(RECOGNIZED_INFO_TAGS):
        func = click.option("--"+tag.lower(), _option_name(tag),
                            metavar="VALUE",
                            help="Set %s in bag-info.txt" % tag)(func)
    return func

def configure_logging(logfile=None, quiet=False):
    """
    set up the root logger for command-line use
    """
    level = logging.ERROR if quiet else logging.INFO
    if logfile:
        logging.basicConfig(filename=logfile, level=level, format=LOG_FORMAT,
                            force=True)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, force=True)

@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(VERSION, prog_name="simplebag")
@click.option("--processes", type=click.IntRange(min=1), default=1,
              show_default=True,
              help="Use multiple threads to calculate checksums faster")
@click.option("--log", type=click.Path(dir_okay=False),
              help="The name of the log file (default: stderr)")
@click.option("--quiet", is_flag=True, help="Suppress all progress information "
                                            "other than errors")
@click.option("--validate", is_flag=True,
              help="Validate existing bags in the provided directories instead "
                   "of creating new ones")
@click.option("--fast", is_flag=True,
              help="Modify --validate behaviour to only test whether the bag "
                   "directory has the number of files and total size specified "
                   "in Payload-Oxum without performing checksum validation")
@click.option("--completeness-only", is_flag=True,
              help="Modify --validate behaviour to test whether the bag "
                   "directory has the expected payload specified in the "
                   "checksum manifests without performing checksum validation")
@algorithm_options
@metadata_options
@click.argument("directory", nargs=-1, required=True,
                type=click.Path(file_okay=False))
@click.pass_context
def cli(ctx, directory, processes, log, quiet, validate, fast,
        completeness_only, **kw):
    """
    Create or validate a BagIt bag in each DIRECTORY.

    By default, each directory is converted into a bag in place:  its
    contents are moved into a "data" subdirectory and manifests for the
    selected checksum algorithms (sha256 and sha512 unless others are
    selected) are written alongside.
    """
    if fast and completeness_only:
        raise click.UsageError("--fast and --completeness-only cannot be "
                               "used together", ctx)
    if (fast or completeness_only) and not validate:
        raise click.UsageError("--fast and --completeness-only may only be "
                               "used with --validate", ctx)

    configure_logging(log, quiet)

    algorithms = [alg for alg in SUPPORTED_ALGORITHMS if kw.get(alg)]
    if not algorithms:
        algorithms = list(DEFAULT_ALGORITHMS)

    metadata = {}
    for tag in RECOGNIZED_INFO_TAGS:
        value = kw.get(_option_name(tag))
        if value is not None:
            metadata[tag] = value

    mode = ValidationMode.FULL
    if fast:
        mode = ValidationMode.FAST
    elif completeness_only:
        mode = ValidationMode.COMPLETENESS

    failures = 0
    for bagdir in directory:
        if validate:
            ok = validate_one(bagdir, mode, processes)
        else:
            ok = make_one(bagdir, algorithms, metadata, processes)
        if not ok:
            failures += 1

    LOGGER.info("%d of %d directories processed successfully",
                len(directory) - failures, len(directory))
    if failures:
        ctx.exit(1)

def validate_one(bagdir, mode, processes):
    """
    validate a single bag, logging the outcome.  Warnings are logged but do
    not make the bag invalid.  Return True if the bag is valid.
    """
    try:
        results = validate_bag(bagdir, mode, processes, PROB)
    except BagError as ex:
        LOGGER.error("%s is invalid: %s", bagdir, ex)
        return False

    for issue in results.failed(WARN):
        LOGGER.warning("%s: %s", bagdir, issue.description)

    errors = results.failed(ERROR)
    if errors:
        LOGGER.error("%s is invalid: %d validation error%s detected", bagdir,
                     len(errors), (len(errors) > 1 and "s") or "")
        for issue in errors:
            LOGGER.error("  %s", issue.description)
        return False
    return True

def make_one(bagdir, algorithms, metadata, processes):
    """
    convert a single directory into a bag, logging the outcome.  Return True
    if the bag was created.
    """
    try:
        make_bag(bagdir, algorithms, metadata, processes)
    except (BagError, OSError) as ex:
        LOGGER.error("Failed to create bag in %s: %s", bagdir, ex)
        return False
    return True

def main():
    """
    the console script entry point
    """
    cli(prog_name="simplebag")

if __name__ == "__main__":
    main()
