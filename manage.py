import json
import os
import uuid

import click
from flask import current_app
from flask.cli import FlaskGroup
from qrcode.exceptions import DataOverflowError

from certpress.app import create_app, load_typefaces, storage_path
from certpress.certgen import (
    certificate_view_url,
    make_certificate_pdf,
    render_template_sample,
)
from certpress.services.certificates_preview import generate_preview
from certpress.shared.certificates_layout import LayoutError, parse_layout
from certpress.shared.colors import ColorError
from certpress.shared.storage import write_atomic
from certpress.shared.text_variables import CertificateContext, sample_context
from certpress.shared.typefaces import MissingFontError

cli = FlaskGroup(create_app=create_app)

_DATE = click.DateTime(formats=["%Y-%m-%d"])


def _load_layout(path: str):
    try:
        with open(path, encoding="utf-8") as fh:
            return parse_layout(json.load(fh))
    except (OSError, json.JSONDecodeError, LayoutError, ColorError) as exc:
        raise click.ClickException(f"Invalid layout {path}: {exc}") from exc


@cli.command("render-cert")
@click.option("--template", "template_path", required=True, type=click.Path(exists=True))
@click.option("--layout", "layout_path", required=True, type=click.Path(exists=True))
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--team", "team_name", default="")
@click.option("--batch", "batch_name", default="")
@click.option("--start", "start_date", type=_DATE)
@click.option("--end", "end_date", type=_DATE)
@click.option("--uuid", "certificate_uuid", default=None, help="Public certificate id for the QR code")
@click.option("--locale", default=None)
@click.option("--out", "output_path", default=None)
@click.option("--skip-if-exists", is_flag=True)
def render_cert(
    template_path: str,
    layout_path: str,
    first_name: str,
    last_name: str,
    team_name: str,
    batch_name: str,
    start_date,
    end_date,
    certificate_uuid: str | None,
    locale: str | None,
    output_path: str | None,
    skip_if_exists: bool,
):
    """Render one certificate PDF."""
    layout = _load_layout(layout_path)
    certificate_uuid = certificate_uuid or str(uuid.uuid4())
    context = CertificateContext(
        first_name=first_name,
        last_name=last_name,
        team_name=team_name,
        batch_name=batch_name,
        start_date=start_date.date() if start_date else None,
        end_date=end_date.date() if end_date else None,
    )
    output_path = output_path or storage_path(
        current_app, "certificates", f"{certificate_uuid}.pdf"
    )
    try:
        digest = make_certificate_pdf(
            output_path,
            template_pdf=template_path,
            layout=layout,
            registry=load_typefaces(current_app),
            context=context,
            locale=locale or current_app.config["DEFAULT_LOCALE"],
            qr_url=certificate_view_url(
                current_app.config["PUBLIC_BASE_URL"], certificate_uuid
            ),
            skip_if_exists=skip_if_exists,
        )
    except (MissingFontError, DataOverflowError) as exc:
        current_app.logger.error("[CERT-FAIL] %s", exc)
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{output_path} sha256={digest}")


@cli.command("render-sample")
@click.option("--template", "template_path", required=True, type=click.Path(exists=True))
@click.option("--layout", "layout_path", required=True, type=click.Path(exists=True))
@click.option("--locale", default=None)
@click.option("--out", "output_path", default=None)
def render_sample(
    template_path: str, layout_path: str, locale: str | None, output_path: str | None
):
    """Render a template with placeholder recipient data."""
    layout = _load_layout(layout_path)
    output_path = output_path or storage_path(
        current_app,
        "templates",
        os.path.splitext(os.path.basename(template_path))[0] + ".sample.pdf",
    )
    try:
        pdf_bytes = render_template_sample(
            template_path,
            layout,
            load_typefaces(current_app),
            locale=locale or current_app.config["DEFAULT_LOCALE"],
        )
    except (MissingFontError, DataOverflowError) as exc:
        raise click.ClickException(str(exc)) from exc
    write_atomic(output_path, pdf_bytes)
    current_app.logger.info("[CERT-SAMPLE] %s", output_path)
    click.echo(output_path)


@cli.command("preview")
@click.option("--template", "template_path", required=True, type=click.Path(exists=True))
@click.option("--layout", "layout_path", required=True, type=click.Path(exists=True))
@click.option("--locale", default=None)
@click.option("--scale", default=2.0, show_default=True, type=float)
@click.option("--out", "output_path", default=None)
def preview(
    template_path: str,
    layout_path: str,
    locale: str | None,
    scale: float,
    output_path: str | None,
):
    """Render a PNG preview of a template sample."""
    layout = _load_layout(layout_path)
    output_path = output_path or storage_path(
        current_app,
        "previews",
        "tpl-" + os.path.splitext(os.path.basename(template_path))[0] + ".png",
    )
    try:
        result = generate_preview(
            template_path,
            layout,
            load_typefaces(current_app),
            context=sample_context(),
            locale=locale or current_app.config["DEFAULT_LOCALE"],
            qr_url=certificate_view_url(
                current_app.config["PUBLIC_BASE_URL"], "preview"
            ),
            scale=scale,
        )
    except (MissingFontError, DataOverflowError) as exc:
        raise click.ClickException(str(exc)) from exc
    write_atomic(output_path, result.png)
    for warning in result.warnings:
        click.echo(warning, err=True)
    click.echo(output_path)


@cli.command("typefaces")
def typefaces():
    """List typefaces available to layouts."""
    registry = load_typefaces(current_app)
    if not registry:
        click.echo(f"No typefaces in {current_app.config['TYPEFACE_DIR']}")
        return
    for name in sorted(registry):
        click.echo(name)


if __name__ == "__main__":
    cli()
