import argparse
import logging
import sys

import config
from paramsync.io import default_page_state, load_page_state, parse_assignment
from paramsync.model import Model
from paramsync.params import ParameterError
from view.console import draw_form
from view.presenter import FormPresenter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Edit and save fridge parameters")
    parser.add_argument(
        "--page", "-p",
        help="JSON page state (params, csrf_blob, allowed, numinputs, yesnoinputs)",
        default=None,
    )
    parser.add_argument(
        "--url",
        help="base URL of the settings page; saves go to <url>/" + config.SAVE_ENDPOINT,
        default=config.DEFAULT_BASE_URL,
    )
    parser.add_argument("--token", help="auth token sent with saves", default=None)
    parser.add_argument(
        "--set", "-s",
        action="append", default=[], metavar="NAME=VALUE",
        help="set a parameter (repeatable)",
    )
    parser.add_argument(
        "--adjust", "-a",
        action="append", default=[], metavar="NAME=DELTA",
        help="add DELTA to a numeric parameter (repeatable)",
    )
    parser.add_argument("--save", action="store_true", help="save after applying edits")
    parser.add_argument(
        "--timeout", type=float, default=None,
        help="give up waiting for the save after this many seconds",
    )
    parser.add_argument("--gui", action="store_true", help="open the pygame form")
    parser.add_argument("--debug", action="store_true", help="debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=config.LOG_FORMAT,
    )

    # ---- Page state: file or built-in defaults ----
    try:
        page = load_page_state(args.page) if args.page else default_page_state()
    except RuntimeError as e:
        print("Failed to load page state:", e)
        return 2
    if args.token is not None:
        page.auth_token = args.token

    model = Model(page.params, page.auth_token, page.save_allowed,
                  inputs=page.inputs, base_url=args.url)
    presenter = FormPresenter(model, page.inputs)

    if args.gui:
        from view.pygame_form import run_form
        run_form(presenter)
        model.wait(args.timeout)
        return 0

    # ---- Apply edits in command line order: sets, then adjusts ----
    try:
        for text in args.set:
            name, value = parse_assignment(text)
            model.set(name, value)
        for text in args.adjust:
            name, delta = parse_assignment(text)
            model.adjust(name, delta)
    except (ValueError, ParameterError) as e:
        print("Bad edit:", e)
        return 2

    failed = []
    if args.save:
        if not model.save_allowed:
            print("Saving is not allowed for this page")
            return 1

        def note_failure(message: str) -> None:
            if message.startswith(config.FAILED_PREFIX):
                failed.append(message)

        model.on("status", note_failure)
        presenter.press_save()
        if not model.wait(args.timeout):
            print("Timed out waiting for the save")
            failed.append("timeout")

    draw_form(presenter)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
