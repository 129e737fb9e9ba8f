"""Tools that read and list files from a single local context directory."""

import asyncio
import logging
from functools import partial
from pathlib import Path

import pdfplumber
import pytesseract

from src.tools.registry import Tool, ToolError

logger = logging.getLogger(__name__)

READ_LOCAL_FILE = "read_local_file"
LIST_LOCAL_FILES = "list_local_files"

_FILE_TYPES = {
    ".pdf": "PDF document",
    ".txt": "Text file",
    ".md": "Markdown file",
    ".json": "JSON file",
    ".csv": "CSV file",
    ".xml": "XML file",
    ".yaml": "YAML file",
    ".yml": "YAML file",
}

_PDF_METADATA_KEYS = ("Title", "Author", "Subject", "Creator", "Producer", "CreationDate")

_IMAGE_PDF_MIN_CHARS = 50
_OCR_RESOLUTION = 300
_OCR_LANGUAGES = "spa+eng"
_OCR_UNAVAILABLE = (
    "OCR System Tools Not Available:\n\n"
    "The tesseract binary is not installed on this system.\n"
    "To enable OCR, install it (macOS: brew install tesseract; "
    "Ubuntu: sudo apt-get install tesseract-ocr tesseract-ocr-spa)."
)


def _file_type(path: Path) -> str:
    return _FILE_TYPES.get(path.suffix.lower(), "Text file")


def _safe_path(base_dir: Path, filename: str) -> Path:
    """Resolve filename inside base_dir. Only the base name is honoured."""
    base = base_dir.resolve()
    target = (base / Path(filename).name).resolve()
    if target.parent != base:
        raise ToolError(f"Access denied. File must be within {base_dir}")
    return target


def _ocr_page(page) -> str:
    """OCR one pdfplumber page; degrades to an explanatory message instead of raising."""
    try:
        image = page.to_image(resolution=_OCR_RESOLUTION).original
        data = pytesseract.image_to_data(image, lang=_OCR_LANGUAGES, output_type=pytesseract.Output.DICT)
    except pytesseract.TesseractNotFoundError:
        logger.warning("OCR requested but tesseract is not installed")
        return _OCR_UNAVAILABLE
    except (pytesseract.TesseractError, OSError, RuntimeError, ValueError) as exc:
        logger.warning("OCR failed: %s", exc)
        return f"OCR Processing Failed: {exc}\n\nThis image-based PDF could not be processed for text extraction."

    words = [w for w in data["text"] if w.strip()]
    scores = [float(c) for c, w in zip(data["conf"], data["text"]) if w.strip() and float(c) >= 0]
    confidence = round(sum(scores) / len(scores)) if scores else 0
    return "\n".join([
        "OCR Text Extraction Results:",
        f"Confidence Level: {confidence}%",
        "",
        "Extracted Text:",
        " ".join(words) or "(no text recognised)",
        "",
        f"Note: first page rendered at {_OCR_RESOLUTION} DPI, languages {_OCR_LANGUAGES}. "
        "OCR accuracy depends on image quality.",
    ])


def _read_pdf(path: Path) -> str:
    with pdfplumber.open(path) as pdf:
        page_texts = [page.extract_text() or "" for page in pdf.pages]
        metadata = pdf.metadata or {}
        page_count = len(pdf.pages)
        text = "\n\n".join(t for t in page_texts if t.strip())
        ocr_text = None
        # Barely any text layer: treat as a scan
        if pdf.pages and len(text.strip()) < _IMAGE_PDF_MIN_CHARS:
            logger.info("%s looks image-based, running OCR on the first page", path.name)
            ocr_text = _ocr_page(pdf.pages[0])

    size_kb = round(path.stat().st_size / 1024)
    lines = [
        f"PDF Content from {path.name}:",
        f"Pages: {page_count}",
        f"File Size: {size_kb} KB",
        "",
    ]
    if ocr_text is not None:
        lines += ["Detected image-based PDF. OCR text extraction:", "", ocr_text, ""]
    lines += [
        "Direct PDF Text Content:",
        text or "(No direct text extracted)",
        "",
        "PDF Metadata:",
    ]
    lines += [f"- {key}: {metadata.get(key) or 'N/A'}" for key in _PDF_METADATA_KEYS]
    return "\n".join(lines)


def _read_file(base_dir: Path, filename: str) -> str:
    filename = filename.strip()
    if not filename:
        raise ToolError("No filename given")
    path = _safe_path(base_dir, filename)
    if not path.is_file():
        raise ToolError(f"File '{filename}' not found in {base_dir}")
    if path.suffix.lower() == ".pdf":
        return _read_pdf(path)
    return path.read_text(encoding="utf-8")


def _list_files(base_dir: Path) -> str:
    if not base_dir.is_dir():
        raise ToolError(f"Directory not found: {base_dir}")
    files = sorted(p for p in base_dir.iterdir() if p.is_file() and not p.name.startswith("."))
    if not files:
        return f"No files found in {base_dir} directory."
    listing = "\n".join(f"- {p.name} ({_file_type(p)})" for p in files)
    return (
        f"Available files in {base_dir}:\n{listing}\n\n"
        "Supported file types: Text (.txt, .md, .json, .csv), PDF (.pdf)"
    )


async def read_local_file(base_dir: Path, filename: str) -> str:
    logger.debug("Reading local file %r from %s", filename, base_dir)
    return await asyncio.to_thread(_read_file, base_dir, filename)


async def list_local_files(base_dir: Path, _argument: str = "") -> str:
    return await asyncio.to_thread(_list_files, base_dir)


def build_local_file_tools(base_dir: Path) -> list[Tool]:
    return [
        Tool(
            name=READ_LOCAL_FILE,
            description=(
                f"Read a file from the {base_dir} directory. Supports text files "
                "(.txt, .md, .json, .csv) and PDF files (.pdf). The argument is the file name."
            ),
            func=partial(read_local_file, base_dir),
        ),
        Tool(
            name=LIST_LOCAL_FILES,
            description=f"List all files available in the {base_dir} directory. The argument is ignored.",
            func=partial(list_local_files, base_dir),
        ),
    ]
