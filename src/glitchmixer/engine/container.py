"""Effect container — runs one effect inside a composite with rollback on failure."""

import logging

import sentry_sdk

from glitchmixer.buffer import PixelBuffer
from glitchmixer.errors import GlitchError

logger = logging.getLogger(__name__)


def _capture_with_context(e: Exception, effect_id: str, extra: dict):
    """Capture exception to Sentry with effect-level context and fingerprint dedup."""
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("effect_id", effect_id)
        scope.fingerprint = ["effect-crash", effect_id, type(e).__name__]
        scope.set_context("effect", extra)
        sentry_sdk.capture_exception(e, scope=scope)


class EffectContainer:
    """Container that wraps an effect's apply() function.

    Pipeline: snapshot → process → (on failure) restore.
    Effects mutate the buffer in place, so a failure part-way through would
    leave a half-written image; the snapshot lets the composite continue
    from the pre-effect pixels instead.
    """

    def __init__(self, effect_fn, effect_id: str):
        self.effect_fn = effect_fn
        self.effect_id = effect_id
        self.last_error: Exception | None = None

    def process(self, buffer: PixelBuffer, options, rng, **kwargs) -> bool:
        """Run the effect. Returns True if it completed, False if rolled back.

        GlitchError subclasses (e.g. InvalidSecondaryImage in strict mode)
        are deliberate failures and propagate to the caller.
        """
        self.last_error = None
        snapshot = buffer.data.copy()

        # Context for Sentry (no pixel data)
        sentry_ctx = {
            "options_type": type(options).__name__,
            "width": buffer.width,
            "height": buffer.height,
            "buffer_bytes": len(buffer),
        }

        try:
            self.effect_fn(buffer, options, rng, **kwargs)
        except GlitchError:
            buffer.data[:] = snapshot
            raise
        except Exception as e:
            self.last_error = e
            _capture_with_context(e, self.effect_id, sentry_ctx)
            logger.error(
                "Effect %s failed on %dx%d buffer: %s",
                self.effect_id,
                buffer.width,
                buffer.height,
                type(e).__name__,
            )
            logger.debug("Effect %s exception detail: %s", self.effect_id, e)
            buffer.data[:] = snapshot
            return False

        return True
