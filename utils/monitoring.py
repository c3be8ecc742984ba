"""
Request logging and in-process request metrics
"""
from flask import request, g
from utils.logging_config import sanitize_log_data
import threading
import time
import json
import logging

logger = logging.getLogger(__name__)

SLOW_REQUEST_SECONDS = 1.0


class PerformanceMonitor:
    """Track request counts and timings per endpoint"""

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        self.metrics = {
            'total_requests': 0,
            'slow_requests': 0,
            'failed_requests': 0,
            'endpoint_stats': {}
        }

    def record_request(self, endpoint: str, duration: float, status_code: int):
        with self._lock:
            self.metrics['total_requests'] += 1
            stats = self.metrics['endpoint_stats'].setdefault(endpoint, {
                'count': 0,
                'total_time': 0.0,
                'avg_time': 0.0,
                'slow_count': 0
            })
            stats['count'] += 1
            stats['total_time'] += duration
            stats['avg_time'] = stats['total_time'] / stats['count']

            if duration > SLOW_REQUEST_SECONDS:
                self.metrics['slow_requests'] += 1
                stats['slow_count'] += 1

            if status_code >= 400:
                self.metrics['failed_requests'] += 1

    def get_stats(self):
        with self._lock:
            return json.loads(json.dumps(self.metrics))


performance_monitor = PerformanceMonitor()


def request_logger_middleware(app):
    """Log every request and feed the performance monitor"""

    @app.before_request
    def before_request():
        g.start_time = time.time()
        logger.info(f"Incoming: {request.method} {request.path} | IP: {request.remote_addr}")

        if request.method in ('POST', 'PUT', 'PATCH') and request.is_json:
            body = request.get_json(silent=True)
            if isinstance(body, dict):
                logger.debug(f"Request body: {json.dumps(sanitize_log_data(body))}")

    @app.after_request
    def after_request(response):
        if hasattr(g, 'start_time'):
            duration = time.time() - g.start_time
            logger.info(
                f"Response: {request.method} {request.path} | "
                f"Status: {response.status_code} | "
                f"Duration: {duration:.3f}s"
            )
            if duration > SLOW_REQUEST_SECONDS:
                logger.warning(f"SLOW REQUEST: {request.method} {request.path} took {duration:.3f}s")

            response.headers['X-Response-Time'] = f"{duration:.3f}s"
            performance_monitor.record_request(
                endpoint=request.endpoint or request.path,
                duration=duration,
                status_code=response.status_code
            )

        return response
