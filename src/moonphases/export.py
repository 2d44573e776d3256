"""Frame-sequenced export: sweeps the orbit and assembles an animated GIF."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from PIL import Image

from moonphases.compute import classify_phase
from moonphases.encoder import EncoderBridge, EncoderUnavailableError
from moonphases.i18n import t
from moonphases.models import ExportSettings
from moonphases.renderers.composite import compose_frame
from moonphases.state import AngleState

logger = logging.getLogger(__name__)

Deliver = Callable[[bytes, str], None]


class FrameRenderer(Protocol):
    async def render(self) -> tuple[Image.Image, Image.Image]:
        """Return (orbit view, moon view) for the current angle."""
        ...


@dataclass
class ExportSession:
    """Per-call export state. Lives only inside FrameSequencer.export."""

    original_angle: float
    total_frames: int
    frame_delay_ms: int
    width: int
    height: int
    token: object
    frame_index: int = 0


class FrameSequencer:
    """Drive the angle through a full rotation and encode one frame per step.

    Args:
        state: Shared angle owner. The sequencer holds its export guard for
            the whole call.
        renderer: Rendering subsystem subscribed to ``state``. It must report
            each angle through ``state.mark_drawn``.
        encoder: Encoding engine for this export. Closed when the call ends.
        deliver: Receives ``(data, filename)`` once encoding succeeds.
        lang: Language of the phase caption drawn on each frame.
    """

    def __init__(
        self,
        state: AngleState,
        renderer: FrameRenderer,
        encoder: EncoderBridge,
        deliver: Deliver | None = None,
        lang: str = "en",
        filename: str = ExportSettings.filename,
    ) -> None:
        self.state = state
        self.renderer = renderer
        self.encoder = encoder
        self.deliver = deliver
        self.lang = lang
        self.filename = filename

    async def export(
        self,
        total_frames: int = ExportSettings.total_frames,
        frame_delay_ms: int = ExportSettings.frame_delay_ms,
        width: int = ExportSettings.width,
        height: int = ExportSettings.height,
    ) -> bytes:
        """Capture ``total_frames`` composites at angles ``i / total_frames * 360``.

        The angle is restored to its pre-export value and the encoder is
        closed on every exit path.

        Returns:
            The encoded animation.

        Raises:
            EncoderUnavailableError: Engine missing; nothing was touched.
            ExportInProgressError: Another export holds the angle.
            EncodingError: The engine failed after frames were appended.
            ValueError: total_frames is not positive or frame_delay_ms is
                negative.
        """
        if total_frames <= 0:
            raise ValueError(f"total_frames must be positive, got {total_frames}")
        if frame_delay_ms < 0:
            raise ValueError(f"frame_delay_ms must not be negative, got {frame_delay_ms}")
        if not self.encoder.available():
            raise EncoderUnavailableError("encoding engine is not available")

        token = self.state.begin_export()
        session = ExportSession(
            original_angle=self.state.get(),
            total_frames=total_frames,
            frame_delay_ms=frame_delay_ms,
            width=width,
            height=height,
            token=token,
        )
        logger.info(
            "Export started: %d frames, %d ms, %dx%d",
            total_frames, frame_delay_ms, width, height,
        )
        try:
            for i in range(total_frames):
                session.frame_index = i
                await self._capture(session, i / total_frames * 360)
            self.state.set(session.original_angle, token=token)
            data = await self.encoder.finalize()
        except BaseException as e:
            logger.warning(
                "Export aborted at frame %d/%d: %s",
                session.frame_index, total_frames, e,
            )
            raise
        finally:
            try:
                self._restore(session)
            finally:
                self.state.cancel_drawn()
                self.state.end_export(token)
                self.encoder.close()

        if self.deliver is not None:
            self.deliver(data, self.filename)
        logger.info("Export finished: %s (%d bytes)", self.filename, len(data))
        return data

    def _restore(self, session: ExportSession) -> None:
        # The angle is written before listeners run; a failing listener must
        # not mask the export's own outcome.
        try:
            self.state.set(session.original_angle, token=session.token)
        except Exception:
            logger.exception("Listener failed while restoring %.2f°", session.original_angle)

    async def _capture(self, session: ExportSession, angle: float) -> None:
        drawn = self.state.drawn(angle)
        self.state.set(angle, token=session.token)
        await drawn

        orbit_view, moon_view = await self.renderer.render()
        phase = classify_phase(angle, self.lang)
        frame = compose_frame(
            orbit_view, moon_view, t("overlay_phase", self.lang).format(name=phase.name)
        )
        if frame.size != (session.width, session.height):
            frame = frame.resize((session.width, session.height), Image.Resampling.LANCZOS)
        await self.encoder.append(frame, session.frame_delay_ms)
        logger.debug(
            "Frame %d/%d at %.1f° (%s)",
            session.frame_index + 1, session.total_frames, angle, phase.type.value,
        )
