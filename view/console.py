from typing import List

from .presenter import FormPresenter


def render_lines(presenter: FormPresenter) -> List[str]:
    """Text rendering of the form: one row per field, then the status line."""
    rows = [presenter.fields[name] for name in presenter.order]
    title_w = max((len(fv.title) for fv in rows), default=0)

    lines = []
    for fv in rows:
        marker = "*" if fv.modified else " "
        shown = fv.text if fv.yesno else fv.text + fv.unit
        lines.append(f"{marker} {fv.title:<{title_w}}  {shown:>8}   (was {fv.old_text})")

    lines.append("")
    lines.append(f"Status: {presenter.status or '-'}")
    return lines


def draw_form(presenter: FormPresenter, out=print) -> None:
    for line in render_lines(presenter):
        out(line)
