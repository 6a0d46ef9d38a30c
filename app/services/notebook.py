"""Convert an uploaded Jupyter notebook to HTML by shelling out to nbconvert."""

from __future__ import annotations

import logging
import subprocess
import tempfile
import time
from pathlib import Path
from typing import TYPE_CHECKING

from app.core.errors import ConversionError

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

NOTEBOOK_EXTENSION = ".ipynb"


def build_convert_command(
    executable: str, notebook_path: Path, output_dir: Path, output_stem: str
) -> list[str]:
    """Argument list for `jupyter nbconvert --to html` (no shell involved)."""
    return [
        executable,
        "nbconvert",
        "--to",
        "html",
        str(notebook_path),
        f"--output-dir={output_dir}",
        f"--output={output_stem}",
    ]


def convert_notebook_to_html(content: bytes, study_id: str, settings: Settings) -> str:
    """
    Write the notebook to a temporary directory, run the converter and return the HTML.

    Temporary files are removed whether or not the conversion succeeds.
    Raises ConversionError on a non-zero exit, timeout, missing executable or missing output.
    """
    output_stem = f"{study_id}-{int(time.time() * 1000)}"
    with tempfile.TemporaryDirectory(prefix="notebook-") as tmp:
        tmp_dir = Path(tmp)
        notebook_path = tmp_dir / f"upload{NOTEBOOK_EXTENSION}"
        notebook_path.write_bytes(content)
        command = build_convert_command(
            settings.CONVERTER_COMMAND, notebook_path, tmp_dir, output_stem
        )
        try:
            subprocess.run(
                command,
                check=True,
                capture_output=True,
                text=True,
                timeout=settings.CONVERTER_TIMEOUT_SEC,
            )
        except subprocess.TimeoutExpired as e:
            logger.error(
                "Notebook conversion timed out after %ss (case_study_id=%s)",
                settings.CONVERTER_TIMEOUT_SEC,
                study_id,
            )
            raise ConversionError() from e
        except subprocess.CalledProcessError as e:
            logger.error(
                "Notebook conversion failed (exit %s, case_study_id=%s): %s",
                e.returncode,
                study_id,
                (e.stderr or "").strip()[:2000],
            )
            raise ConversionError() from e
        except OSError as e:
            logger.error("Notebook converter could not be started: %s", e)
            raise ConversionError() from e

        output_path = tmp_dir / f"{output_stem}.html"
        if not output_path.is_file():
            logger.error("Converter produced no output at %s", output_path)
            raise ConversionError()
        return output_path.read_text(encoding="utf-8")
