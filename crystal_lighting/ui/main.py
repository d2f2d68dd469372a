"""Window loop for watching an evaluation and playing manually."""

from __future__ import annotations

import logging
import time
from typing import Optional

from ..config import EvaluatorConfig
from ..errors import EvaluationTimeout
from ..evaluation import ManualSession, SimulationContext, deadline_expired
from . import layout
from .toolkit import CrystalLightingUI, ensure_pygame

_logger = logging.getLogger(__name__)

DEFAULT_SCREEN_SIZE = (1280, 900)


def _screen_size(pygame) -> tuple:
    info = pygame.display.Info()
    width = getattr(info, "current_w", 0) or DEFAULT_SCREEN_SIZE[0]
    height = getattr(info, "current_h", 0) or DEFAULT_SCREEN_SIZE[1]
    return width, height


def create_window(context: SimulationContext, config: EvaluatorConfig, session: Optional[ManualSession] = None) -> CrystalLightingUI:
    pygame = ensure_pygame()
    # run_window shuts the display down on exit, so a later window re-inits it.
    pygame.display.init()
    cell_size = config.cell_size
    if cell_size <= 0:
        cell_size = layout.fit_cell_size(
            context.board.height, context.board.width, _screen_size(pygame)
        )
    ui = CrystalLightingUI(
        context,
        session=session,
        cell_size=cell_size,
        use_display=True,
        plain=config.plain,
        mark=config.mark,
        show_rays=config.show_rays,
    )
    pygame.display.set_caption(f"Seed {config.seed}")
    return ui


def run_window(
    context: SimulationContext,
    config: EvaluatorConfig,
    session: Optional[ManualSession] = None,
    *,
    fps: int = 30,
) -> None:
    """Show the board until the window is closed or the session is submitted.

    With a session the loop ends once READY is clicked; it raises
    :class:`EvaluationTimeout` when ``config.manual_timeout`` runs out first.
    Without a session the board stays on screen until the window is closed.
    """

    pygame = ensure_pygame()
    ui = create_window(context, config, session)
    clock = pygame.time.Clock()
    deadline = time.monotonic() + config.manual_timeout if session is not None else None

    try:
        while True:
            events = pygame.event.get()
            if any(event.type == pygame.QUIT for event in events):
                if session is not None and not session.ready:
                    session.mark_ready()
                break
            ui.process_events(events)
            ui.render()
            if session is not None and session.ready:
                break
            if deadline_expired(deadline):
                raise EvaluationTimeout(
                    f"Manual play did not finish within {config.manual_timeout} seconds."
                )
            clock.tick(fps)
        if config.save:
            path = f"{config.seed}.png"
            pygame.image.save(ui.render(), path)
            _logger.info("Saved board image to %s", path)
    finally:
        pygame.display.quit()


__all__ = ["create_window", "run_window"]
