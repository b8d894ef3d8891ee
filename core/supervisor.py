"""
Process-wide crash logging.

Failures outside a request (main thread, worker threads, stray asyncio tasks)
are logged and swallowed here so the server keeps accepting requests. Failures
inside a request never reach these hooks; the /mcp route turns them into a 500.
"""
import asyncio
import sys
import threading

from core.logger_config import logger


def log_uncaught_exception(exc_type, exc_value, exc_traceback):
    if issubclass(exc_type, KeyboardInterrupt):
        # Let Ctrl+C stop the process as usual
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.opt(exception=(exc_type, exc_value, exc_traceback)).error(
        f"Uncaught exception: {exc_value}"
    )


def log_thread_exception(args: threading.ExceptHookArgs):
    thread_name = args.thread.name if args.thread else 'unknown'
    logger.opt(exception=(args.exc_type, args.exc_value, args.exc_traceback)).error(
        f"Uncaught exception in thread {thread_name}: {args.exc_value}"
    )


def log_loop_exception(loop: asyncio.AbstractEventLoop, context: dict):
    # Covers futures/tasks whose exception was never retrieved
    exc = context.get('exception')
    message = context.get('message', 'Unhandled error in event loop')
    if exc is not None:
        logger.opt(exception=exc).error(f"Unhandled rejection: {message}")
    else:
        logger.error(f"Unhandled rejection: {message}")


def install_process_hooks() -> None:
    sys.excepthook = log_uncaught_exception
    threading.excepthook = log_thread_exception


def install_loop_hook(loop: asyncio.AbstractEventLoop = None) -> None:
    loop = loop or asyncio.get_running_loop()
    loop.set_exception_handler(log_loop_exception)
