"""
Tripkeeper CLI Interface
Command line interface implemented using Typer
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer

from tripkeeper.config.loader import load_config
from tripkeeper.core.logger import get_logger, setup_logging

logger = get_logger(__name__)


def _open_db(config_file: Optional[str]):
    if config_file:
        load_config(config_file)
        setup_logging()

    from tripkeeper.core.db import get_db

    return get_db()


def trips(
    status: Optional[str] = typer.Option(None, help="Only trips with this status"),
    config_file: Optional[str] = typer.Option(None, help="Configuration file path"),
):
    """List trips, latest start date first"""
    from tripkeeper.models.entities import TripStatus

    db = _open_db(config_file)
    try:
        selected = TripStatus(status) if status else None
    except ValueError:
        logger.error(f"Unknown trip status: {status}")
        raise typer.Exit(1)

    for trip in db.trips.list_by_status(selected):
        typer.echo(f"{trip.id}  {trip.start_date} - {trip.end_date}  [{trip.status}]  {trip.title}")


def albums(
    config_file: Optional[str] = typer.Option(None, help="Configuration file path"),
):
    """List albums with their item counts"""
    from tripkeeper.services.relations import RelationManager

    db = _open_db(config_file)
    relations = RelationManager(db)
    for album in db.albums.list():
        trip = relations.trip_title(album.trip_id) if album.trip_id else "-"
        typer.echo(f"{album.id}  {album.item_count:>4} items  {album.title}  ({trip})")


def upload(
    album_id: str = typer.Argument(..., help="Target album id"),
    files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, help="Files to upload"),
    config_file: Optional[str] = typer.Option(None, help="Configuration file path"),
):
    """Upload photos and videos into an album"""
    from tripkeeper.repositories.base import DanglingReferenceError
    from tripkeeper.services.media_upload import MediaUploadService, load_files

    db = _open_db(config_file)
    service = MediaUploadService(db)

    try:
        report = asyncio.run(service.upload(album_id, load_files([str(path) for path in files])))
    except DanglingReferenceError as e:
        logger.error(str(e))
        raise typer.Exit(1)

    typer.echo(f"Uploaded {report.success_count}/{report.total} files to album {album_id}")
    for failure in report.failures:
        typer.echo(f"  failed: {failure.file_name}: {failure.reason}")
    if report.failure_count:
        raise typer.Exit(2)


def show_document(
    doc_id: str = typer.Argument(..., help="Personal document id"),
    out: Path = typer.Option(..., "--out", help="Where to write the document image"),
    config_file: Optional[str] = typer.Option(None, help="Configuration file path"),
):
    """Write a document's stored image to a file"""
    from tripkeeper.processing.media_pipeline import parse_data_url

    db = _open_db(config_file)
    document = db.documents.get_by_id(doc_id)
    if document is None:
        logger.error(f"Document not found: {doc_id}")
        raise typer.Exit(1)

    image = db.documents.reveal_image(document)
    parsed = parse_data_url(image) if image else None
    if parsed is None:
        logger.error(f"Document {doc_id} has no displayable image")
        raise typer.Exit(1)

    mime_type, data = parsed
    out.write_bytes(data)
    typer.echo(f"Wrote {len(data)} bytes ({mime_type}) to {out}")


def check_references(
    config_file: Optional[str] = typer.Option(None, help="Configuration file path"),
):
    """Report references that point at deleted records"""
    from tripkeeper.services.relations import RelationManager

    db = _open_db(config_file)
    dangling = RelationManager(db).find_dangling_references()
    if not dangling:
        typer.echo("No dangling references")
        return

    for ref in dangling:
        typer.echo(f"{ref.collection}/{ref.record_id}: {ref.field} -> {ref.missing_id}")
    raise typer.Exit(1)


def create_app() -> typer.Typer:
    app = typer.Typer()

    app.command()(trips)
    app.command()(albums)
    app.command()(upload)
    app.command("show-document")(show_document)
    app.command("check-references")(check_references)
    return app


def main():
    """Main function"""
    create_app()()


if __name__ == "__main__":
    main()
