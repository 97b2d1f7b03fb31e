from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# HTTP
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Cache
cache_hits_total = Counter('cache_hits_total', 'Total cache hits')
cache_misses_total = Counter('cache_misses_total', 'Total cache misses')

# Learning activity
task_checks_total = Counter('task_checks_total', 'Submitted task answers', ['task_type', 'correct'])
lessons_completed_total = Counter('lessons_completed_total', 'Lessons marked as done')
progress_tokens_issued_total = Counter('progress_tokens_issued_total', 'Progress share tokens issued')


def metrics_endpoint():
    """Prometheus scrape endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
