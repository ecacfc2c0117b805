"""
InfluxDB store for collecting spans and reconstructing traces.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass
import logging
import os

from influxdb import InfluxDBClient
from influxdb.resultset import ResultSet

from .interfaces import SpanStore, TraceQueryer
from .point_codec import TaggedRecord, decode, decode_record, encode, merge_fields
from .queries import InfluxQuery, select_children, select_spans
from ..errors import IntegrityError, MalformedResultError, TraceNotFoundError
from ..models import ROOT_ID, Annotation, SpanID, Trace
from ..models.identifiers import canonical_id

logger = logging.getLogger(__name__)


@dataclass
class InfluxDBStoreConfig:
    """Configuration for the InfluxDB span store."""
    host: str = "localhost"
    port: int = 8086
    username: str = "root"
    password: str = "root"
    database: str = "appdash"
    measurement: str = "spans"
    retention_policy: str = "autogen"
    traces_per_page: int = 10
    timeout_seconds: int = 30
    ssl: bool = False
    create_database: bool = True
    client: Optional[Any] = None

    @classmethod
    def from_env(cls, **overrides) -> "InfluxDBStoreConfig":
        """
        Build a configuration from ``INFLUXDB_*`` environment variables.

        Args:
            overrides: Values that take precedence over the environment

        Returns:
            The configuration
        """
        env = {
            "host": os.getenv("INFLUXDB_HOST"),
            "port": os.getenv("INFLUXDB_PORT"),
            "username": os.getenv("INFLUXDB_USERNAME"),
            "password": os.getenv("INFLUXDB_PASSWORD"),
            "database": os.getenv("INFLUXDB_DATABASE"),
            "traces_per_page": os.getenv("INFLUXDB_TRACES_PER_PAGE"),
        }
        values = {key: value for key, value in env.items() if value}
        for key in ("port", "traces_per_page"):
            if key in values:
                values[key] = int(values[key])
        values.update(overrides)
        return cls(**values)


class InfluxDBStore(SpanStore, TraceQueryer):
    """
    Span store backed by an InfluxDB measurement.

    Each span is a series tagged with its trace, span and parent identifiers;
    its annotations are the series' fields.
    """

    def __init__(self, config: InfluxDBStoreConfig):
        """
        Initialize the InfluxDB store.

        Args:
            config: Configuration object for the connection
        """
        if config.traces_per_page <= 0:
            raise ValueError(f"traces_per_page must be positive, got {config.traces_per_page}")

        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

        self.client = config.client or InfluxDBClient(
            host=config.host,
            port=config.port,
            username=config.username,
            password=config.password,
            database=config.database,
            ssl=config.ssl,
            timeout=config.timeout_seconds,
        )
        if config.create_database:
            self._create_database_if_not_exists()

    def collect(self, span_id: SpanID, *annotations: Annotation) -> None:
        """
        Merge annotations into the stored span with the given identity.

        The first collect for an identity writes a fresh point. Later collects
        append the merged field set (see ``merge_fields``) as a new point
        stamped after the stored one. InfluxDB unions the fields of points that
        share a series and timestamp, so reusing the stored timestamp would
        keep keys the merge drops.

        Args:
            span_id: Identity of the span
            annotations: Annotations collected for the span
        """
        existing = self._find_span_record(span_id)
        record = encode(span_id, annotations, measurement=self.config.measurement)
        if existing is not None:
            record.fields = merge_fields(record.fields, existing.fields)
            if existing.time is not None and record.time <= existing.time:
                record.time = existing.time + 1
        self._write(record)

    def trace(self, trace_id: int) -> Trace:
        """
        Reconstruct the trace with the given identifier.

        Args:
            trace_id: The trace identifier

        Returns:
            The root span with every other span of the trace as a direct child

        Raises:
            TraceNotFoundError: If no span is stored for the trace
            IntegrityError: If the trace has no root span or more than one
        """
        result = self._execute_query(select_spans(self.config.measurement, trace_id=trace_id))
        series = self._series(result)
        if not series:
            raise TraceNotFoundError(canonical_id(trace_id))

        root = None
        children = []
        for group in series:
            span = decode(group)
            if span.id.is_root:
                if root is not None:
                    raise IntegrityError("unexpected multiple root spans")
                root = span
            else:
                children.append(Trace(span=span))

        if root is None:
            raise IntegrityError("root span not found")
        return Trace(span=root, sub=children)

    def traces(self) -> List[Trace]:
        """
        Return up to ``traces_per_page`` traces, each with all of its child spans.

        Raises:
            IntegrityError: If two root spans share a trace identifier or a
                child span's trace has no fetched root
        """
        roots_query = select_spans(
            self.config.measurement,
            parent_id=ROOT_ID,
            limit=self.config.traces_per_page,
        )
        roots = self._series(self._execute_query(roots_query))
        if not roots:
            return []

        traces: Dict[int, Trace] = {}
        for group in roots:
            span = decode(group)
            if span.id.trace in traces:
                raise IntegrityError("duplicated root span")
            traces[span.id.trace] = Trace(span=span)

        children_query = select_children(self.config.measurement, traces.keys())
        for group in self._series(self._execute_query(children_query)):
            span = decode(group)
            trace = traces.get(span.id.trace)
            if trace is None:
                raise IntegrityError("parent not found")
            trace.sub.append(Trace(span=span))

        self.logger.info(f"Loaded {len(traces)} traces")
        return list(traces.values())

    def test_connection(self) -> bool:
        """
        Test the connection to InfluxDB.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            version = self.client.ping()
            self.logger.info(f"Connection to InfluxDB successful (version {version})")
            return True
        except Exception as e:
            self.logger.error(f"Connection test failed: {e}")
            return False

    def close(self) -> None:
        """Close the client's HTTP session."""
        self.client.close()

    def _find_span_record(self, span_id: SpanID) -> Optional[TaggedRecord]:
        query = select_spans(
            self.config.measurement,
            trace_id=span_id.trace,
            span_id=span_id.span,
            parent_id=span_id.parent,
        )
        series = self._series(self._execute_query(query))
        if not series:
            return None
        if len(series) > 1:
            raise MalformedResultError("unexpected multiple series")
        return decode_record(series[0], measurement=self.config.measurement)

    def _create_database_if_not_exists(self) -> None:
        # CREATE DATABASE is a no-op for an existing database.
        self.client.create_database(self.config.database)
        self.logger.info(f"Database '{self.config.database}' is ready")

    def _write(self, record: TaggedRecord) -> None:
        self.logger.debug(f"Writing point {record.tags} with fields {sorted(record.fields)}")
        try:
            self.client.write_points(
                [record.to_point()],
                database=self.config.database,
                retention_policy=self.config.retention_policy,
            )
        except Exception as e:
            self.logger.error(f"Error writing point {record.tags}: {e}")
            raise

    def _execute_query(self, query: InfluxQuery) -> ResultSet:
        """
        Execute a single InfluxQL statement.

        Args:
            query: The statement and its bound parameters

        Returns:
            The statement's result set

        Raises:
            MalformedResultError: If the engine does not return exactly one result
        """
        try:
            self.logger.debug(f"Executing InfluxQL query: {query.text} with {query.params}")
            result = self.client.query(
                query.text,
                bind_params=query.params,
                database=self.config.database,
                epoch="ns",
            )
        except Exception as e:
            self.logger.error(f"Error executing query: {e}")
            raise

        # A single statement yields a single ResultSet; anything else is a list.
        if not isinstance(result, ResultSet):
            raise MalformedResultError(
                f"unexpected number of results for a single query: {len(result)}"
            )
        return result

    def _series(self, result: ResultSet) -> List[Dict[str, Any]]:
        series = result.raw.get("series") or []
        self.logger.debug(f"Query returned {len(series)} series")
        return series
