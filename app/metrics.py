from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from flask import Response, request
import time
from functools import wraps

# Database Metrics
db_query_duration_seconds = Histogram(
    "atcreator_db_query_duration_seconds", "Store operation duration", ["operation"]
)

db_query_total = Counter("atcreator_db_queries_total", "Total store operations", ["operation", "status"])

db_people_total = Gauge("atcreator_people_total", "Total number of people")
db_tags_total = Gauge("atcreator_tags_total", "Total number of tags")
db_tags_per_category = Gauge("atcreator_tags_per_category", "Number of tags per category", ["category"])

# Generation Metrics
handles_generated_total = Counter("atcreator_handles_generated_total", "Handles produced by copy actions")

people_solicited_total = Counter("atcreator_people_solicited_total", "Solicitations recorded")

# API Metrics
api_request_duration_seconds = Histogram(
    "atcreator_api_request_duration_seconds", "API request duration", ["endpoint", "method"]
)

api_requests_total = Counter(
    "atcreator_api_requests_total", "Total API requests", ["endpoint", "method", "status_code"]
)


def init_metrics(app):
    @app.route("/api/metrics")
    def metrics():
        update_db_metrics()
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    @app.before_request
    def before_request():
        request.start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - getattr(request, "start_time", time.time())
        api_request_duration_seconds.labels(endpoint=request.endpoint or "unknown", method=request.method).observe(
            duration
        )
        api_requests_total.labels(
            endpoint=request.endpoint or "unknown", method=request.method, status_code=response.status_code
        ).inc()
        return response

    app.logger.info("Prometheus metrics initialized at /api/metrics")


def update_db_metrics():
    """Refresh the people/tag gauges from the database."""
    from repositories.person_repository import PersonRepository
    from repositories.tag_repository import TagRepository

    db_people_total.set(PersonRepository.count())
    db_tags_total.set(TagRepository.count())
    for category, count in TagRepository.count_by_category().items():
        db_tags_per_category.labels(category=category).set(count)


def track_db_query(operation):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                db_query_total.labels(operation=operation, status="success").inc()
                return result
            except Exception:
                db_query_total.labels(operation=operation, status="error").inc()
                raise
            finally:
                duration = time.time() - start_time
                db_query_duration_seconds.labels(operation=operation).observe(duration)

        return wrapper

    return decorator
