import atexit
import json
import logging
import os
import sys

import structlog


def _configure_otel_export(root_logger: logging.Logger, endpoint: str) -> None:
    """Attach an OpenTelemetry handler exporting log records over OTLP/gRPC."""
    from opentelemetry._logs import set_logger_provider
    from opentelemetry.exporter.otlp.proto.grpc._log_exporter import \
        OTLPLogExporter
    from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
    from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
    from opentelemetry.sdk.resources import Resource

    service_name = os.getenv("SERVICE_NAME", "elevator-control")
    resource = Resource.create(
        {
            "service.name": service_name,
            "service.namespace": "elevator-control",
        }
    )
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(OTLPLogExporter(endpoint=endpoint, insecure=True))
    )
    set_logger_provider(logger_provider)

    root_logger.addHandler(
        LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
    )

    # Flush pending records on interpreter exit
    atexit.register(logger_provider.shutdown)


def configure_logging() -> logging.Logger:
    """
    Set up structured JSON logging for the service using structlog.

    The standard logging module emits plain messages and structlog renders
    every event as a JSON line with timestamp, level, logger name and call
    site. When OTEL_EXPORTER_OTLP_ENDPOINT is set, records are also exported
    to an OpenTelemetry collector.

    Safe to call more than once; only the first call configures anything.
    """
    root_logger = logging.getLogger()

    # Return early if already configured
    if hasattr(configure_logging, "_configured"):
        return root_logger

    # Remove all existing handlers to prevent duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.JSONRenderer(sort_keys=True, serializer=json.dumps),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level, logging.INFO),
    )
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if otlp_endpoint:
        try:
            _configure_otel_export(root_logger, otlp_endpoint)
        except Exception as e:
            logging.error(f"Failed to configure OpenTelemetry logging: {e}")
            logging.warning("Falling back to console logging without OpenTelemetry")

    configure_logging._configured = True
    return root_logger
