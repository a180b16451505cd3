"""
The ``oval`` command group: collect, eval, analyse, validate-xml and
generate report.
"""

import argparse

from oval_core.infrastructure.processors import DocumentType, DocumentValidator
from oval_core.infrastructure.reporting import ReportRenderer
from .analyse_characteristics import AnalyseCharacteristicsUseCase
from .collect_characteristics import CollectCharacteristicsUseCase
from .command_registry import CommandContext, CommandDescriptor, CommandRegistry, ExitStatus
from .evaluate_definitions import EvaluateDefinitionsUseCase


def _configure_collect(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("definitions", metavar="oval-definitions.xml")


def _run_collect(args: argparse.Namespace, context: CommandContext) -> ExitStatus:
    CollectCharacteristicsUseCase(context.config, output=context.binary_out).execute(args.definitions)
    return ExitStatus.OK


def _configure_eval(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--id", dest="definition_id", metavar="DEFINITION",
                        help="Evaluate only the definition with this id")
    parser.add_argument("--result-file", metavar="FILE", help="Write OVAL results to FILE")
    parser.add_argument("--report-file", metavar="FILE",
                        help="Write an HTML report to FILE (requires --result-file)")
    parser.add_argument("--skip-valid", action="store_true", help="Skip validation of the input document")
    parser.add_argument("definitions", metavar="oval-definitions.xml")


def _run_eval(args: argparse.Namespace, context: CommandContext) -> ExitStatus:
    use_case = EvaluateDefinitionsUseCase(context.config, verbosity=context.verbosity, output=context.out)
    outcome = use_case.execute(
        args.definitions,
        definition_id=args.definition_id,
        result_file=args.result_file,
        report_file=args.report_file,
        validate=context.config.evaluation.validate and not args.skip_valid
    )
    return ExitStatus.OK if outcome.success else ExitStatus.FAIL


def _configure_analyse(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--result-file", metavar="FILE", help="Write OVAL results to FILE")
    parser.add_argument("definitions", metavar="oval-definitions.xml")
    parser.add_argument("syschar", metavar="system-characteristics.xml")


def _run_analyse(args: argparse.Namespace, context: CommandContext) -> ExitStatus:
    AnalyseCharacteristicsUseCase(context.config).execute(args.definitions, args.syschar,
                                                          result_file=args.result_file)
    return ExitStatus.OK


def _configure_validate(parser: argparse.ArgumentParser) -> None:
    doctype = parser.add_mutually_exclusive_group()
    doctype.add_argument("--definitions", dest="doctype", action="store_const", const=DocumentType.DEFINITIONS,
                         help="Validate an OVAL Definitions document (default)")
    doctype.add_argument("--syschar", dest="doctype", action="store_const", const=DocumentType.SYSCHAR,
                         help="Validate an OVAL System Characteristics document")
    doctype.add_argument("--results", dest="doctype", action="store_const", const=DocumentType.RESULTS,
                         help="Validate an OVAL Results document")
    parser.add_argument("--file-version", metavar="VERSION", help="Schema version of the document")
    parser.add_argument("file", metavar="oval-file.xml")
    parser.set_defaults(doctype=DocumentType.DEFINITIONS)


def _run_validate(args: argparse.Namespace, context: CommandContext) -> ExitStatus:
    def reporter(line: str) -> None:
        if context.verbosity >= 0:
            print(line, file=context.out)

    valid = DocumentValidator(args.file_version).validate(args.file, args.doctype, reporter)
    return ExitStatus.OK if valid else ExitStatus.FAIL


def _configure_report(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-o", "--output", metavar="FILE", help="Write the report to FILE instead of stdout")
    parser.add_argument("results", metavar="oval-results.xml")


def _run_report(args: argparse.Namespace, context: CommandContext) -> ExitStatus:
    html = ReportRenderer(context.config.report).render(args.results, args.output)
    if html is not None:
        context.out.write(html)
    return ExitStatus.OK


OVAL_COMMANDS = (
    CommandDescriptor(
        name="oval collect",
        summary="Probe the system and print OVAL System Characteristics",
        usage="[options] oval-definitions.xml",
        configure=_configure_collect,
        handler=_run_collect
    ),
    CommandDescriptor(
        name="oval eval",
        summary="Evaluate OVAL definitions on the running system",
        usage="[options] oval-definitions.xml",
        configure=_configure_eval,
        handler=_run_eval
    ),
    CommandDescriptor(
        name="oval analyse",
        summary="Evaluate OVAL definitions against recorded system characteristics",
        usage="[options] oval-definitions.xml system-characteristics.xml",
        configure=_configure_analyse,
        handler=_run_analyse
    ),
    CommandDescriptor(
        name="oval validate-xml",
        summary="Validate an OVAL document",
        usage="[options] oval-file.xml",
        configure=_configure_validate,
        handler=_run_validate
    ),
    CommandDescriptor(
        name="oval generate report",
        summary="Render an HTML report from OVAL results",
        usage="[options] oval-results.xml",
        configure=_configure_report,
        handler=_run_report
    ),
)


def register_oval_commands(registry: CommandRegistry) -> None:
    registry.describe_group("oval", "Open Vulnerability and Assessment Language")
    registry.describe_group("oval generate", "Generate a document from OVAL content")
    for descriptor in OVAL_COMMANDS:
        registry.register(descriptor)
