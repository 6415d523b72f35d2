import pygame
from dataclasses import dataclass
from typing import List, Optional, Tuple

import config
from .presenter import FormPresenter

Rect = Tuple[int, int, int, int]    # x, y, w, h


@dataclass
class Hit:
    rect: Rect
    action: str     # "text", "up", "down", "yes", "no", "save"
    name: str = ""


def contains(rect: Rect, pos: Tuple[int, int]) -> bool:
    x, y, w, h = rect
    return x <= pos[0] < x + w and y <= pos[1] < y + h


def layout(presenter: FormPresenter) -> List[Hit]:
    """Clickable areas for every row, plus the save button."""
    hits: List[Hit] = []
    btn_h = config.ROW_H - 12
    value_x = config.SCREEN_W // 2 - 40
    y = config.MARGIN

    for name in presenter.order:
        fv = presenter.fields[name]
        top = y + 6
        if fv.yesno:
            hits.append(Hit((value_x, top, config.BUTTON_W, btn_h), "yes", name))
            hits.append(Hit((value_x + config.BUTTON_W + 8, top, config.BUTTON_W, btn_h), "no", name))
        else:
            hits.append(Hit((value_x, top, 90, btn_h), "text", name))
            x = value_x + 98
            hits.append(Hit((x, top, config.BUTTON_W, btn_h), "down", name))
            hits.append(Hit((x + config.BUTTON_W + 8, top, config.BUTTON_W, btn_h), "up", name))
        y += config.ROW_H

    hits.append(Hit((config.MARGIN, y + 10, 120, btn_h), "save"))
    return hits


def hit_test(hits: List[Hit], pos: Tuple[int, int]) -> Optional[Hit]:
    for hit in hits:
        if contains(hit.rect, pos):
            return hit
    return None


class FormWindow:
    """pygame rendering of a FormPresenter. Owns the text-entry focus."""

    def __init__(self, presenter: FormPresenter) -> None:
        self.presenter = presenter
        self.hits = layout(presenter)
        self.editing: Optional[str] = None
        self.buffer = ""

    # -------------------------------
    # Input
    # -------------------------------
    def _commit(self) -> None:
        if self.editing is not None:
            name, text = self.editing, self.buffer
            self.editing = None
            self.presenter.submit_text(name, text)

    def click(self, pos: Tuple[int, int]) -> None:
        hit = hit_test(self.hits, pos)
        if hit is None or hit.action != "text" or hit.name != self.editing:
            # clicking anywhere else commits, like leaving the field
            self._commit()
        if hit is None:
            return

        p = self.presenter
        if hit.action == "text":
            if self.editing != hit.name:
                self.editing = hit.name
                self.buffer = p.fields[hit.name].text
        elif hit.action == "up":
            p.step_up(hit.name)
        elif hit.action == "down":
            p.step_down(hit.name)
        elif hit.action == "yes":
            p.press_yes(hit.name)
        elif hit.action == "no":
            p.press_no(hit.name)
        elif hit.action == "save":
            p.press_save()

    def key(self, event) -> None:
        if self.editing is None:
            return
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._commit()
        elif event.key == pygame.K_ESCAPE:
            self.editing = None
        elif event.key == pygame.K_BACKSPACE:
            self.buffer = self.buffer[:-1]
        elif event.unicode and event.unicode in "0123456789.-+eE":
            self.buffer += event.unicode

    # -------------------------------
    # Drawing
    # -------------------------------
    def _button(self, screen, font, rect: Rect, label: str, color) -> None:
        pygame.draw.rect(screen, color, pygame.Rect(rect), border_radius=4)
        surf = font.render(label, True, config.TEXT_COLOR)
        screen.blit(surf, surf.get_rect(center=pygame.Rect(rect).center))

    def draw(self, screen, font) -> None:
        screen.fill(config.BG_COLOR)
        p = self.presenter

        y = config.MARGIN
        for name in p.order:
            fv = p.fields[name]
            color = config.MODIFIED_COLOR if fv.modified else config.TEXT_COLOR
            screen.blit(font.render(fv.title, True, color), (config.MARGIN, y + 12))
            old = font.render(f"was {fv.old_text}", True, config.DIM_COLOR)
            screen.blit(old, (config.SCREEN_W - old.get_width() - config.MARGIN, y + 12))
            y += config.ROW_H

        for hit in self.hits:
            if hit.action == "save":
                self._button(screen, font, hit.rect, "Save", config.BUTTON_COLOR)
                continue
            fv = p.fields[hit.name]
            if hit.action == "text":
                text = self.buffer + "_" if self.editing == hit.name else fv.text + fv.unit
                pygame.draw.rect(screen, config.DIM_COLOR, pygame.Rect(hit.rect), 1)
                screen.blit(font.render(text, True, config.TEXT_COLOR), (hit.rect[0] + 6, hit.rect[1] + 6))
            elif hit.action in ("up", "down"):
                self._button(screen, font, hit.rect, "+" if hit.action == "up" else "-", config.BUTTON_COLOR)
            else:
                lit = fv.on if hit.action == "yes" else not fv.on
                label = "Yes" if hit.action == "yes" else "No"
                self._button(screen, font, hit.rect, label, config.ON_COLOR if lit else config.BUTTON_COLOR)

        save_rect = self.hits[-1].rect
        status = font.render(p.status, True, config.TEXT_COLOR)
        screen.blit(status, (save_rect[0] + save_rect[2] + 16, save_rect[1] + 6))


def run_form(presenter: FormPresenter) -> None:
    pygame.init()
    screen = pygame.display.set_mode((config.SCREEN_W, config.SCREEN_H))
    pygame.display.set_caption("Settings")
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("consolas,menlo,monospace", 16)

    window = FormWindow(presenter)
    running = True
    while running:
        clock.tick(config.FPS)

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
            elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                window.click(e.pos)
            elif e.type == pygame.KEYDOWN:
                window.key(e)

        # deliver finished saves on this thread
        presenter.model.pump()

        window.draw(screen, font)
        pygame.display.flip()

    pygame.quit()
