"""
Helpers for validating metric value changes during tests.

Works on labeled children, e.g. ``METRICS["cache_lookups_total"].labels(result="hit")``.
"""

from contextlib import contextmanager


def _current_value(metric) -> float:
    if not hasattr(metric, "_value"):
        raise ValueError(f"Metric {metric} doesn't have a _value attribute")
    return metric._value.get()


@contextmanager
def metric_delta(metric, expected_delta=1):
    """
    Context manager to validate metric value changes.

    Usage:
        with metric_delta(METRICS["summaries_total"].labels(outcome="cached")):
            # Code that should increment the counter by 1
            ...
    """
    initial_value = _current_value(metric)

    yield

    final_value = _current_value(metric)
    actual_delta = final_value - initial_value

    if actual_delta != expected_delta:
        raise AssertionError(
            f"Expected metric to change by {expected_delta}, "
            f"but it changed by {actual_delta} "
            f"(from {initial_value} to {final_value})"
        )


def get_histogram_count(histogram) -> float:
    """Get the current observation count for a histogram child."""
    for metric in histogram.collect():
        for sample in metric.samples:
            if sample.name.endswith("_count"):
                return sample.value
    return 0.0


@contextmanager
def histogram_observes(histogram, min_observations=1):
    """Context manager to validate that a histogram recorded observations."""
    initial_count = get_histogram_count(histogram)

    yield

    actual_observations = get_histogram_count(histogram) - initial_count
    if actual_observations < min_observations:
        raise AssertionError(
            f"Expected at least {min_observations} histogram observations, but got {actual_observations}"
        )
