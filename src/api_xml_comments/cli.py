"""CLI entry point for api-xml-comments."""

import logging
from pathlib import Path

import click
from pydantic import ValidationError

from api_xml_comments.comments.ids import (
    MethodIdentity,
    PropertyIdentity,
    comment_id_for_method,
    comment_id_for_property,
    parse_type_name,
)
from api_xml_comments.comments.index import CommentsLoadError, load_comments
from api_xml_comments.config import CREF_STYLE_ENV, MergeSettings
from api_xml_comments.merger import XmlCommentsOperationFilter
from api_xml_comments.parser.bindings import BindingsError, load_bindings
from api_xml_comments.parser.detect import format_for_output
from api_xml_comments.parser.swagger import (
    DocumentLoadError,
    apply_operations,
    dump_document,
    load_document,
    parse_openapi,
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log every lookup and skip.")
def main(verbose: bool):
    """API XML Comments: merge XML documentation comments into OpenAPI documents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("-x", "--xml-comments", "xml_paths", required=True, multiple=True, type=click.Path(exists=True, path_type=Path), help="XML comments file (repeatable).")
@click.option("-b", "--bindings", "bindings_path", required=True, type=click.Path(exists=True, path_type=Path), help="Operation bindings file (YAML or JSON).")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the merged document.")
@click.option("--cref-style", default=None, type=click.Choice(["full", "short"]), help="How <see cref> references are rendered.")
def merge(doc_path: Path, xml_paths: tuple[Path, ...], bindings_path: Path, output: Path, cref_style: str | None):
    """Merge XML comments into an OpenAPI/Swagger document."""
    click.echo(f"Parsing {doc_path}...")
    try:
        doc = load_document(doc_path)
    except DocumentLoadError as e:
        raise click.ClickException(str(e)) from e
    operations = parse_openapi(doc)
    click.echo(f"Found {len(operations)} operations.")

    try:
        index = load_comments(*xml_paths)
        bindings = load_bindings(bindings_path)
    except (CommentsLoadError, BindingsError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Loaded {len(index)} documented members from {len(xml_paths)} file(s).")

    try:
        settings = MergeSettings(cref_style=cref_style) if cref_style else MergeSettings()
    except ValidationError as e:
        raise click.ClickException(f"Invalid {CREF_STYLE_ENV}: {e.errors()[0]['msg']}") from e
    merger = XmlCommentsOperationFilter(index, settings)
    merged = merger.apply_all(operations, bindings)

    apply_operations(doc, operations)
    dump_document(doc, output, format_for_output(output, doc_path))
    click.echo(f"Merged comments into {merged} operations, saved to {output}")


@main.command()
@click.argument("type_name")
@click.argument("member")
@click.option("-p", "--param", "param_types", multiple=True, help="Parameter type, in order (repeatable).")
@click.option("--generic-arity", default=0, type=int, help="Number of generic parameters on the method.")
@click.option("--property", "is_property", is_flag=True, help="Build a property identifier instead.")
def comment_id(type_name: str, member: str, param_types: tuple[str, ...], generic_arity: int, is_property: bool):
    """Print the XML comments identifier for a method or property."""
    try:
        declaring_type = parse_type_name(type_name)
        parameter_types = [parse_type_name(p) for p in param_types]
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    if is_property:
        click.echo(comment_id_for_property(PropertyIdentity(declaring_type=declaring_type, name=member)))
    else:
        method = MethodIdentity(
            declaring_type=declaring_type,
            name=member,
            generic_arity=generic_arity,
            parameter_types=parameter_types,
        )
        click.echo(comment_id_for_method(method))
