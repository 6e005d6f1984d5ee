"""Command-line interface for receipt parsing and on-device learning."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Dict, Any, Optional

import click
from tqdm import tqdm

from .config import Settings
from .exceptions import ReceiptRiserError
from .export import ExcelExporter
from .models import ReceiptField
from .parse import ReceiptParser

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)


def read_receipt_text(path: Path) -> str:
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def fail(error: Exception):
    logger.error(f"Command failed: {error}")
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def get_parser(ctx: click.Context) -> ReceiptParser:
    """Build the pipeline on first use so option errors never touch the data directory."""
    if ctx.obj.get('parser') is None:
        ctx.obj['parser'] = ReceiptParser(ctx.obj['settings'])
    return ctx.obj['parser']


async def parse_files(parser: ReceiptParser, files: List[Path]) -> List[Dict[str, Any]]:
    results = []
    with tqdm(total=len(files), desc="Parsing receipts") as pbar:
        for receipt_file in files:
            try:
                parsed = await parser.parse_receipt_text(read_receipt_text(receipt_file))
                row = parsed.to_dict()
                row['fileName'] = receipt_file.name
                results.append(row)
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Cannot read {receipt_file}: {e}")
            pbar.update(1)
            pbar.set_postfix({'parsed': len(results)})
    return results


@click.group()
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='YAML settings file')
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path),
              help='Directory for training data and preferences')
@click.option('--debug', is_flag=True, help='Enable debug output')
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], data_dir: Optional[Path], debug: bool):
    """Receipt Riser - Extract receipt data from OCR text and learn from corrections."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = Settings.load(config_path)
    except ReceiptRiserError as e:
        fail(e)

    if data_dir:
        settings = settings.merged({'data_dir': str(data_dir)})

    ctx.ensure_object(dict)
    ctx.obj['settings'] = settings


@cli.command()
@click.argument('receipt_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def parse(ctx: click.Context, receipt_file: Path):
    """Parse one OCR text file and print the result as JSON."""
    try:
        parser = get_parser(ctx)
        parsed = asyncio.run(parser.parse_receipt_text(read_receipt_text(receipt_file)))
    except (ReceiptRiserError, OSError, UnicodeDecodeError) as e:
        fail(e)

    click.echo(json.dumps(parsed.to_dict(), ensure_ascii=False, indent=2))


@cli.command()
@click.option('--in', 'input_dir', required=True, type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='Input directory containing OCR text files')
@click.option('--out', 'output_dir', required=True, type=click.Path(file_okay=False, path_type=Path),
              help='Output directory for results')
@click.option('--excel', is_flag=True, help='Also write an Excel workbook')
@click.pass_context
def batch(ctx: click.Context, input_dir: Path, output_dir: Path, excel: bool):
    """Parse every *.txt file in a directory."""
    files = sorted(input_dir.glob('*.txt'))
    if not files:
        logger.warning(f"No receipt text files found in {input_dir}")

    try:
        parser = get_parser(ctx)
        results = asyncio.run(parse_files(parser, files))

        output_dir.mkdir(parents=True, exist_ok=True)
        json_path = output_dir / 'results.json'
        with open(json_path, 'w', encoding='utf-8') as f:
            json.dump(results, f, ensure_ascii=False, indent=2)

        excel_path = None
        if excel:
            excel_path = output_dir / 'receipts.xlsx'
            ExcelExporter(excel_path).export_receipts(results)
    except (ReceiptRiserError, OSError) as e:
        fail(e)

    click.echo("\n" + "=" * 50)
    click.echo("PROCESSING SUMMARY")
    click.echo("=" * 50)
    click.echo(f"Total files found: {len(files)}")
    click.echo(f"Successfully parsed: {len(results)}")
    click.echo(f"Failed: {len(files) - len(results)}")
    click.echo("\nOutput files:")
    click.echo(f"  - JSON: {json_path}")
    if excel_path:
        click.echo(f"  - Excel: {excel_path}")


@cli.command()
@click.argument('receipt_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--field', required=True, type=click.Choice([f.value for f in ReceiptField]),
              help='Field that was corrected')
@click.option('--original', default='', help='Value the parser extracted')
@click.option('--corrected', required=True, help='Correct value')
@click.pass_context
def correct(ctx: click.Context, receipt_file: Path, field: str, original: str, corrected: str):
    """Record a correction for a receipt field."""
    try:
        parser = get_parser(ctx)
        asyncio.run(parser.store_correction(read_receipt_text(receipt_file), field, original, corrected))
    except (ReceiptRiserError, OSError, UnicodeDecodeError) as e:
        fail(e)

    click.echo(f"Recorded correction for {field}: {original!r} -> {corrected!r}")


@cli.command()
@click.option('--force', is_flag=True, help='Train now regardless of schedule and example count')
@click.pass_context
def train(ctx: click.Context, force: bool):
    """Run one scheduled training check, or force training."""
    try:
        parser = get_parser(ctx)
        if force:
            trained = asyncio.run(parser.scheduler.force_train_now())
        else:
            trained = asyncio.run(parser.scheduler.check_and_train())
    except ReceiptRiserError as e:
        fail(e)

    if trained:
        click.echo(f"Training complete: {len(parser.trainer.field_models)} field models")
    else:
        click.echo(f"Training skipped: {parser.trainer.training_status or 'conditions not met'}")


@cli.command()
@click.pass_context
def stats(ctx: click.Context):
    """Show training data statistics and the last training time."""
    try:
        parser = get_parser(ctx)
        asyncio.run(parser.initialize())
        training_stats = asyncio.run(parser.trainer.get_training_stats())
        history = asyncio.run(parser.corrections.get_history())
    except ReceiptRiserError as e:
        fail(e)

    last_training = parser.scheduler.get_last_training_time()

    click.echo(f"Training examples: {training_stats['total_examples']}")
    for field, count in sorted(training_stats['examples_per_field'].items()):
        click.echo(f"  - {field}: {count}")
    click.echo(f"Field models loaded: {len(training_stats['models'])}")
    for field, model in sorted(training_stats['models'].items()):
        click.echo(f"  - {field}: {model['examples']} examples, {model['labels']} labels")
    click.echo(f"Corrections recorded: {len(history)}")
    click.echo(f"Last training: {last_training.isoformat() if last_training else 'never'}")


@cli.command('export-training')
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export_training(ctx: click.Context, path: Path):
    """Export all training examples to a JSON file."""
    written = asyncio.run(get_parser(ctx).training_store.export(path))
    if written is None:
        click.echo(f"Error: could not export training data to {path}", err=True)
        sys.exit(1)
    click.echo(f"Exported training data to {written}")


@cli.command('import-training')
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def import_training(ctx: click.Context, path: Path):
    """Replace the training examples with those in a JSON file."""
    if not asyncio.run(get_parser(ctx).training_store.import_examples(path)):
        click.echo(f"Error: could not import training data from {path}", err=True)
        sys.exit(1)
    click.echo(f"Imported training data from {path}")


@cli.command('clear-training')
@click.option('--include-corrections', is_flag=True, help='Also clear the correction history')
@click.confirmation_option(prompt='Delete all stored training data?')
@click.pass_context
def clear_training(ctx: click.Context, include_corrections: bool):
    """Delete stored training examples."""
    parser = get_parser(ctx)
    asyncio.run(parser.training_store.clear())
    if include_corrections:
        asyncio.run(parser.corrections.clear_correction_history())
    click.echo("Training data cleared")


if __name__ == '__main__':
    cli()
