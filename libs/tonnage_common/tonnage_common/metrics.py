from prometheus_client import Counter, Histogram

HTTP_REQUESTS = Counter(
    "http_requests_total",
    "HTTP requests",
    labelnames=("service", "method", "endpoint", "status_code"),
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration",
    labelnames=("service", "method", "endpoint"),
    buckets=(0.05, 0.1, 0.2, 0.5, 1, 2, 5, 10),
)

TONNAGE_CALCULATIONS = Counter(
    "tonnage_calculations_total",
    "Tonnage calculations by outcome",
    labelnames=("service", "status"),
)

VCF_LOOKUPS = Counter(
    "vcf_lookups_total",
    "VCF resolutions by match kind (exact grid point or nearest entry)",
    labelnames=("service", "match"),
)


def record_calculation(service: str, status: str) -> None:
    TONNAGE_CALCULATIONS.labels(service=service, status=status).inc()


def record_vcf_lookup(service: str, exact: bool) -> None:
    VCF_LOOKUPS.labels(service=service, match="exact" if exact else "nearest").inc()
