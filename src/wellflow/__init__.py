"""wellflow: personal calorie and intermittent-fasting tracker."""

__version__ = "0.1.0"
