"""llmdashsim: synthetic telemetry console for a simulated vLLM cluster."""

__version__ = "0.1.0"
