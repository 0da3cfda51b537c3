from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union
import json
import logging
import yaml
from pydantic import BaseModel, Field

from .classifier import is_ai_graph
from .diagnostics import Diagnostic, Severity
from .engine import validate_ai_nodes
from .ir import Graph, InvalidGraphError
from .settings import ValidationSettings

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


class ValidationReport(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    # False when the graph has no AI nodes and the semantic pass was skipped
    ai_checked: bool = False


class FileResult(BaseModel):
    path: str
    report: Optional[ValidationReport] = None
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.report is not None and self.report.valid


def load_graph(path: Path) -> Graph:
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise InvalidGraphError(f"Could not read {path}: {e}") from e
    try:
        data = yaml.safe_load(text) if path.suffix.lower() in _YAML_SUFFIXES else json.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        raise InvalidGraphError(f"Could not parse {path}: {e}") from e
    return Graph.from_dict(data)


def validate_graph(graph: Graph, settings: Optional[ValidationSettings] = None,
                   max_workers: int = 1) -> ValidationReport:
    if not is_ai_graph(graph):
        logger.debug("no AI nodes, skipping semantic pass")
        return ValidationReport(valid=True)

    diagnostics = validate_ai_nodes(graph, settings, max_workers=max_workers)
    errors = [d.message for d in diagnostics if d.severity is Severity.ERROR]
    warnings = [d.message for d in diagnostics if d.severity is Severity.WARNING]
    return ValidationReport(valid=not errors, errors=errors, warnings=warnings,
                            diagnostics=diagnostics, ai_checked=True)


def validate_graph_from_file(path: Path, settings: Optional[ValidationSettings] = None) -> Tuple[bool, List[Diagnostic]]:
    report = validate_graph(load_graph(path), settings)
    return report.valid, report.diagnostics


def _validate_one(path: Union[str, Path], settings: Optional[ValidationSettings]) -> FileResult:
    try:
        graph = load_graph(Path(path))
    except InvalidGraphError as e:
        logger.warning("skipping %s: %s", path, e)
        return FileResult(path=str(path), failure=str(e))
    return FileResult(path=str(path), report=validate_graph(graph, settings))


def validate_files(paths: Sequence[Union[str, Path]], settings: Optional[ValidationSettings] = None,
                   max_workers: int = 1) -> List[FileResult]:
    """Validate many workflow files; one failed load does not stop the batch."""
    if max_workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(lambda p: _validate_one(p, settings), paths))
    return [_validate_one(p, settings) for p in paths]
