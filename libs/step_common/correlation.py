# libs/step_common/correlation.py
import contextvars
import logging

operation_id_var = contextvars.ContextVar("operation_id", default=None)
batch_id_var = contextvars.ContextVar("batch_id", default=None)


class CorrelationIdFilter(logging.Filter):
    """Stamps records with the operation/batch ids of the current invocation."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.operation_id = operation_id_var.get() or "-"
        record.batch_id = batch_id_var.get() or "-"
        return True


def bind(operation_id: str, batch_id: str) -> None:
    operation_id_var.set(operation_id or None)
    batch_id_var.set(batch_id or None)
