"""Command-line interface for expense-form field extraction."""

import json
import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from tqdm import tqdm

from .export import ExcelExporter, export_json
from .parse import FormParser
from .review import ReviewQueue

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)


class FormProcessor:
    """Batch extraction over a folder of OCR text files."""

    def __init__(self,
                 rules_path: Optional[Path] = None,
                 max_workers: int = 4,
                 encoding: str = 'utf-8',
                 today: Optional[date] = None):
        """
        Initialize the form processor.

        Args:
            rules_path: Keyword rules file, bundled rules if None
            max_workers: Number of parallel workers
            encoding: Encoding of the OCR text files
            today: Fallback date for forms without a readable date
        """
        self.max_workers = max_workers
        self.encoding = encoding
        self.today = today or date.today()

        self.parser = FormParser(rules_path)
        self.review_queue = ReviewQueue()

        self.stats = {
            'total_files': 0,
            'processed': 0,
            'failed': 0,
            'review_items': 0,
        }
        self._stats_lock = threading.Lock()

    @staticmethod
    def find_text_files(input_path: Path) -> List[Path]:
        """Find OCR text files: the path itself, or every *.txt below a directory."""
        if input_path.is_file():
            return [input_path]
        files = sorted(set(input_path.glob('**/*.txt')) | set(input_path.glob('**/*.TXT')))
        logger.info(f"Found {len(files)} OCR text files in {input_path}")
        return files

    def process_single_file(self, text_path: Path) -> Dict[str, Any]:
        """
        Extract one form.

        Args:
            text_path: OCR text file

        Returns:
            Record dictionary with file_path, file_name and needs_review added
        """
        try:
            text = text_path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {text_path}: {e}")
            self._count('failed')
            self.review_queue.add_item(
                file_path=str(text_path),
                reason=f"Processing failed: {e}",
                raw_snippet=f"Error: {e}",
            )
            return {
                'file_path': str(text_path),
                'file_name': text_path.name,
                'needs_review': True,
                'error': str(e),
            }

        fields, results = self.parser.parse_with_details(text, self.today)
        review_item = self.review_queue.add_from_extraction(str(text_path), fields, results, text)

        record = fields.to_dict()
        record.update({
            'file_path': str(text_path),
            'file_name': text_path.name,
            'needs_review': review_item is not None,
        })
        self._count('processed')
        return record

    def _count(self, key: str):
        with self._stats_lock:
            self.stats[key] += 1

    def process_batch(self, input_path: Path) -> List[Dict[str, Any]]:
        """Process every OCR text file under input_path in parallel."""
        text_files = self.find_text_files(input_path)
        self.stats['total_files'] = len(text_files)

        if not text_files:
            logger.warning("No OCR text files found!")
            return []

        results = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_file = {
                executor.submit(self.process_single_file, text_file): text_file
                for text_file in text_files
            }

            with tqdm(total=len(text_files), desc="Extracting forms") as pbar:
                for future in as_completed(future_to_file):
                    results.append(future.result())
                    pbar.update(1)
                    pbar.set_postfix({
                        'processed': self.stats['processed'],
                        'failed': self.stats['failed'],
                    })

        results.sort(key=lambda r: r['file_path'])

        extracted = [r for r in results if 'error' not in r]
        for conflict in self.review_queue.detect_conflicts(extracted):
            self.review_queue.items.append(conflict)
            for record in extracted:
                if record['file_path'] == conflict.file_path:
                    record['needs_review'] = True

        self.stats['review_items'] = len(self.review_queue.items)
        logger.info(f"Batch processing complete. Processed: {self.stats['processed']}, "
                    f"Failed: {self.stats['failed']}, Review items: {self.stats['review_items']}")
        return results


def parse_today(ctx, param, value: Optional[str]) -> Optional[date]:
    """click callback for --today (YYYY-MM-DD)."""
    if value is None:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise click.BadParameter("expected YYYY-MM-DD")


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug output')
def cli(debug: bool):
    """Expense form OCR - extract fields from Japanese expense forms."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.argument('text_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--rules', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Keyword rules YAML file')
@click.option('--today', callback=parse_today, help='Fallback date (YYYY-MM-DD)')
@click.option('--encoding', default='utf-8', help='Encoding of the text file')
def extract(text_file: Path, rules: Optional[Path], today: Optional[date], encoding: str):
    """
    Extract fields from one OCR text file and print them as JSON.

    Example:
        formocr extract ./ocr/slip001.txt
    """
    try:
        parser = FormParser(rules)
        fields = parser.parse(text_file.read_text(encoding=encoding), today)
    except Exception as e:
        logger.error(f"Extraction failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(fields.to_dict(), ensure_ascii=False, indent=2))


@cli.command()
@click.option('--in', 'input_path', required=True, type=click.Path(exists=True, path_type=Path),
              help='OCR text file or directory of text files')
@click.option('--out', 'output_dir', required=True, type=click.Path(path_type=Path),
              help='Output directory for results')
@click.option('--rules', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Keyword rules YAML file')
@click.option('--max-workers', default=4, type=int, help='Maximum number of parallel workers')
@click.option('--summary', is_flag=True, help='Include category summary in Excel output')
@click.option('--encoding', default='utf-8', help='Encoding of the OCR text files')
@click.option('--today', callback=parse_today, help='Fallback date (YYYY-MM-DD)')
def run(input_path: Path,
        output_dir: Path,
        rules: Optional[Path],
        max_workers: int,
        summary: bool,
        encoding: str,
        today: Optional[date]):
    """
    Process a folder of OCR text files and write JSON and Excel output.

    Example:
        formocr run --in ./ocr --out ./out --summary
    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Input: {input_path}")
        logger.info(f"Output directory: {output_dir}")

        processor = FormProcessor(
            rules_path=rules,
            max_workers=max_workers,
            encoding=encoding,
            today=today,
        )
        results = processor.process_batch(input_path)

        if not results:
            logger.error("No files were processed!")
            return

        records = [r for r in results if 'error' not in r]

        json_path = output_dir / 'extracted.json'
        export_json(results, json_path)

        excel_path = output_dir / 'transactions.xlsx'
        ExcelExporter(excel_path).export_transactions(
            records=records,
            review_items=processor.review_queue.items,
            include_summary=summary,
        )

        click.echo("\n" + "=" * 50)
        click.echo("PROCESSING SUMMARY")
        click.echo("=" * 50)
        click.echo(f"Total files found: {processor.stats['total_files']}")
        click.echo(f"Successfully processed: {processor.stats['processed']}")
        click.echo(f"Failed: {processor.stats['failed']}")
        click.echo(f"Items needing review: {processor.stats['review_items']}")
        click.echo("\nOutput files:")
        click.echo(f"  - JSON: {json_path}")
        click.echo(f"  - Excel: {excel_path}")

        if processor.review_queue.items:
            click.echo(f"\n{len(processor.review_queue.items)} items need manual review.")

    except Exception as e:
        logger.error(f"Processing failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    cli()
