"""Column mapping service: entry points used by the API and the CLI."""

import csv
import io
import logging
import re
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from core.column_mapping.aggregator import MappingAggregator
from core.column_mapping.canonical_fields import FieldRegistry, get_registry
from core.column_mapping.exceptions import EmptyInputError, InvalidInputError, InvalidOverrideError
from core.column_mapping.matcher import ColumnMatcher
from core.column_mapping.model import AnalysisResult, RawColumn
from core.config import get_config

logger = logging.getLogger(__name__)

SKIP = "skip"
CANDIDATE_DELIMITERS = ",;\t|"
SNIFF_LINES = 5
_LEADING_BLANK_LINES = re.compile(r"^(?:[ \t]*\r?\n)+")


def sniff_delimiter(text: str) -> str:
    """
    Guess the delimiter from the first few lines.

    Args:
        text: CSV text

    Returns:
        One of , ; tab | (comma when undecidable)
    """
    sample = "\n".join(text.splitlines()[:SNIFF_LINES])
    try:
        return csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        return ","


def read_header_rows(text: str, sample_rows: int) -> Tuple[List[str], List[List[str]], str]:
    """
    Tokenize the header row and up to sample_rows data rows.

    Args:
        text: CSV text
        sample_rows: Number of data rows to keep for value sampling

    Returns:
        (headers, sample rows, delimiter)

    Raises:
        EmptyInputError: If the text holds no header row
        InvalidInputError: If the header row is malformed
    """
    if not text.strip():
        raise EmptyInputError("CSV content is empty")

    text = _LEADING_BLANK_LINES.sub("", text)
    delimiter = sniff_delimiter(text)
    try:
        header_df = pd.read_csv(
            io.StringIO(text),
            sep=delimiter,
            header=None,
            dtype=str,
            keep_default_na=False,
            nrows=1,
            on_bad_lines="skip",
        )
    except pd.errors.EmptyDataError as e:
        raise EmptyInputError("CSV content has no header row") from e
    except pd.errors.ParserError as e:
        raise InvalidInputError(f"Malformed CSV header: {e}") from e

    if header_df.empty:
        raise EmptyInputError("CSV content has no header row")
    headers = header_df.fillna("").values.tolist()[0]
    return headers, read_sample_rows(text, delimiter, len(headers), sample_rows), delimiter


def read_sample_rows(text: str, delimiter: str, width: int, sample_rows: int) -> List[List[str]]:
    """
    Read up to sample_rows data rows after the header, tolerating bad rows.

    Rows longer than the header are trimmed to its width, short rows are
    padded with "". Samples only break ties, so unreadable rows are logged
    and dropped rather than failing the analysis.
    """
    if sample_rows <= 0:
        return []
    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=delimiter,
            header=None,
            names=list(range(width)),
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skiprows=1,
            nrows=sample_rows,
            engine="python",
            on_bad_lines=lambda fields: fields[:width],
        )
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        logger.warning(f"Ignoring unreadable sample rows: {e}")
        return []

    # Short rows leave NaN in the missing cells
    return df.fillna("").values.tolist()


def validate_headers(headers: Sequence[object]) -> None:
    """
    Reject header lists the analysis cannot trust.

    Raises:
        EmptyInputError: If there are no headers
        InvalidInputError: On non-string, badly decoded, or duplicated headers
    """
    if headers is None or len(headers) == 0:
        raise EmptyInputError("Header list is empty")

    seen = set()
    for position, header in enumerate(headers):
        if not isinstance(header, str):
            raise InvalidInputError(
                f"Header at position {position} must be a string, got: {type(header).__name__}"
            )
        if "\ufffd" in header or "\x00" in header:
            raise InvalidInputError(f"Header at position {position} has encoding problems: {header!r}")
        if header.strip():
            if header in seen:
                raise InvalidInputError(f"Duplicate header: {header!r}")
            seen.add(header)


class ColumnMappingService:
    """Analyzes CSV headers and recommends a mapping onto canonical agent fields."""

    def __init__(
        self,
        registry: Optional[FieldRegistry] = None,
        matcher: Optional[ColumnMatcher] = None,
        aggregator: Optional[MappingAggregator] = None,
        sample_rows: int = 3,
    ):
        """
        Initialize the service.

        Args:
            registry: Canonical field registry (bundled registry if None)
            matcher: Column matcher (defaults if None)
            aggregator: Mapping aggregator (defaults if None)
            sample_rows: Data rows sampled per analysis for tie-breaks
        """
        self.registry = registry or get_registry()
        self.matcher = matcher or ColumnMatcher()
        self.aggregator = aggregator or MappingAggregator()
        self.sample_rows = sample_rows

    @classmethod
    def from_config(cls, config=None) -> "ColumnMappingService":
        """Build a service from application configuration."""
        config = config or get_config()
        mapping_config = config.mapping
        return cls(
            registry=get_registry(mapping_config.registry_path),
            matcher=ColumnMatcher.from_config(mapping_config),
            aggregator=MappingAggregator.from_config(mapping_config),
            sample_rows=mapping_config.sample_rows,
        )

    def analyze_csv(self, content: Union[str, bytes], sample_rows: Optional[int] = None) -> AnalysisResult:
        """
        Analyze raw CSV text (only the header row and a few data rows are read).

        Args:
            content: CSV text or UTF-8 bytes
            sample_rows: Override for the number of sampled data rows

        Returns:
            AnalysisResult
        """
        if isinstance(content, bytes):
            try:
                content = content.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise InvalidInputError(f"CSV content is not valid UTF-8: {e}") from e
        if not isinstance(content, str):
            raise InvalidInputError(f"CSV content must be text, got: {type(content).__name__}")

        content = content.lstrip("\ufeff")
        rows_wanted = self.sample_rows if sample_rows is None else sample_rows
        headers, rows, delimiter = read_header_rows(content, rows_wanted)
        return self.analyze_headers(headers, rows, delimiter=delimiter)

    def analyze_headers(
        self,
        headers: Sequence[str],
        sample_rows: Optional[Sequence[Sequence[object]]] = None,
        delimiter: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Analyze a pre-parsed header list.

        Args:
            headers: Header strings in file order
            sample_rows: Optional data rows aligned with headers
            delimiter: Delimiter to report, when known

        Returns:
            AnalysisResult
        """
        validate_headers(headers)
        sample_rows = sample_rows or []

        columns = []
        for index, header in enumerate(headers):
            samples = tuple(
                str(row[index]) for row in sample_rows
                if index < len(row) and row[index] is not None
            )
            columns.append(RawColumn(header=header, index=index, samples=samples))

        candidates_by_column = {
            column: self.matcher.match(column, self.registry) for column in columns
        }
        return self.aggregator.aggregate(columns, candidates_by_column, self.registry, delimiter=delimiter)

    def analyze_dataframe(self, df: pd.DataFrame, sample_rows: Optional[int] = None) -> AnalysisResult:
        """
        Analyze an already-loaded DataFrame's columns.

        Args:
            df: Input dataframe
            sample_rows: Number of rows sampled for tie-breaks

        Returns:
            AnalysisResult
        """
        rows_wanted = self.sample_rows if sample_rows is None else sample_rows
        head = df.head(max(rows_wanted, 0)).fillna("").astype(str)
        return self.analyze_headers(list(df.columns), head.values.tolist())

    def resolve_mapping(
        self,
        headers: Sequence[str],
        recommended_mapping: Mapping[str, str],
        overrides: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Dict[str, str]:
        """
        Merge caller overrides over a recommended mapping.

        An override of "skip" (or None) unmaps the header. An override that
        claims a field recommended for another header takes it over. Two
        overrides claiming the same field, or a recommendation that still
        maps two headers to one field, are rejected.

        Args:
            headers: Headers of the analyzed file
            recommended_mapping: header -> field from an AnalysisResult
            overrides: header -> field, "skip" or None

        Returns:
            Final header -> field mapping with no field used twice

        Raises:
            InvalidOverrideError: On unknown headers/fields or field collisions
        """
        known_headers = set(headers)
        overrides = dict(overrides or {})
        for header, target in list(recommended_mapping.items()) + list(overrides.items()):
            if header not in known_headers:
                raise InvalidOverrideError(f"Unknown header: {header!r}")
            if target not in (None, SKIP) and target not in self.registry:
                raise InvalidOverrideError(f"Unknown canonical field: {target!r}")

        claimed: Dict[str, str] = {}
        for header, target in overrides.items():
            if target in (None, SKIP):
                continue
            if target in claimed:
                raise InvalidOverrideError(
                    f"Field '{target}' overridden for both {claimed[target]!r} and {header!r}"
                )
            claimed[target] = header

        resolved: Dict[str, str] = {}
        recommended_by_field: Dict[str, str] = {}
        for header in headers:
            if header in overrides:
                target = overrides[header]
                if target not in (None, SKIP):
                    resolved[header] = target
                continue
            target = recommended_mapping.get(header)
            if target in (None, SKIP) or target in claimed:
                continue
            if target in recommended_by_field:
                raise InvalidOverrideError(
                    f"Field '{target}' recommended for both {recommended_by_field[target]!r} and {header!r}"
                )
            recommended_by_field[target] = header
            resolved[header] = target
        return resolved

    def apply_mapping(self, df: pd.DataFrame, mapping: Mapping[str, str]) -> pd.DataFrame:
        """
        Rename mapped columns to canonical field keys; unmapped columns are dropped.

        Args:
            df: Input dataframe with the original headers
            mapping: header -> canonical field key

        Returns:
            Dataframe with canonical columns in registry order
        """
        missing = [header for header in mapping if header not in df.columns]
        if missing:
            raise InvalidOverrideError(f"Mapped columns not found in data: {missing}")
        if len(set(mapping.values())) != len(mapping):
            raise InvalidOverrideError("Mapping assigns the same field to more than one column")

        by_field = {field_key: header for header, field_key in mapping.items()}
        df_canonical = pd.DataFrame(index=df.index)
        for field_key in self.registry.keys:
            if field_key in by_field:
                df_canonical[field_key] = df[by_field[field_key]]
        return df_canonical
