"""Constants for OpenTelemetry metrics."""

# Metric name prefix
METRIC_PREFIX = "tourney_api"

# Wallet metrics
WALLET_OPERATIONS_TOTAL = f"{METRIC_PREFIX}.wallet.operations_total"
WALLET_OPERATION_FAILURES = f"{METRIC_PREFIX}.wallet.operation_failures_total"

# Tournament metrics
TOURNAMENT_JOINS_TOTAL = f"{METRIC_PREFIX}.tournament.joins_total"

# HTTP metrics
HTTP_REQUESTS_TOTAL = f"{METRIC_PREFIX}.http.requests_total"
HTTP_REQUEST_DURATION = f"{METRIC_PREFIX}.http.request_duration"

# Common label keys
LABEL_TRANSACTION_TYPE = "transaction_type"
LABEL_ERROR_TYPE = "error_type"
LABEL_JOIN_OUTCOME = "outcome"
LABEL_METHOD = "method"
LABEL_ROUTE = "route"
LABEL_STATUS_CODE = "status_code"
