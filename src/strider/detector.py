"""Delta-threshold step detector."""

from __future__ import annotations

import logging

from strider.motion import AccelSample, ZERO_SAMPLE, compute_delta, is_step_delta

logger = logging.getLogger(__name__)


class StepDetector:
    """Count steps from a push-based stream of acceleration samples.

    The detector owns two pieces of state: the rolling ``last_sample``
    memory and the monotonic ``steps`` counter.  The only noise rejection
    is the single threshold comparison; there is no smoothing or debounce.

    ``last_sample`` advances on every sample, including while idle, so the
    first sample after ``start`` is compared against real motion rather
    than a stale reading.  It starts at :data:`ZERO_SAMPLE`, which means
    the very first sample of the process is compared against (0, 0, 0)
    and can count a spurious step when tracking is already on.
    """

    def __init__(self, steps: int = 0) -> None:
        self.steps = steps
        self.last_sample: AccelSample = ZERO_SAMPLE

    def on_sample(
        self,
        sample: AccelSample | None,
        *,
        tracking: bool,
        sensitivity: float,
    ) -> bool:
        """Feed one sample.  Returns True if it produced a step.

        A ``None`` sample (sensor without gravity-inclusive data) is
        dropped without touching any state.
        """
        if sample is None:
            return False

        delta = compute_delta(self.last_sample, sample)
        counted = tracking and is_step_delta(delta, sensitivity)
        if counted:
            self.steps += 1
            logger.debug("step %d (delta=%.2f > %.2f)", self.steps, delta, sensitivity)

        self.last_sample = sample
        return counted

    def reset(self) -> None:
        """Zero the counter.  The last-sample memory is kept."""
        self.steps = 0
