"""
Report writer - persists rendered documents
"""
import logging
from pathlib import Path
from typing import Iterable, List, Union

from .visualization import RenderedDocument

logger = logging.getLogger(__name__)


def write_text(path: Union[str, Path], content: str) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
    except OSError as e:
        logger.error(f"Failed to write {path}: {e}")
        raise
    logger.info(f"Written: {path}")
    return path


def write_documents(documents: Iterable[RenderedDocument], output_dir: Union[str, Path] = '.') -> List[Path]:
    """Write each document under ``output_dir``; returns the written paths"""
    output_dir = Path(output_dir)
    return [write_text(output_dir / document.filename, document.content) for document in documents]
