import os
import sys
import warnings

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import hashlib
import time
from argparse import ArgumentParser

import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from mandelbrot import RenderParameters, ValidationError, render_frame
from mandelbrot.renderer import BYTES_PER_PIXEL, EVALUATORS


def select_device():
    """Use the first visible GPU when TensorFlow reports one, else the CPU."""

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        # memory growth can only be set before the GPU is initialized
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


def build_parser():
    parser = ArgumentParser(description='Render a colorized Mandelbrot frame into memory and report diagnostics.')

    parser.add_argument('--x-res', type=int,
                        dest='x_res', help='width of the frame in pixels',
                        metavar='X_RES', default=512)

    parser.add_argument('--y-res', type=int,
                        dest='y_res', help='height of the frame in pixels',
                        metavar='Y_RES', default=512)

    parser.add_argument('--scale', type=float,
                        dest='scale', help='zoom factor, at least 1; the view half-width is (2 - |origin|) / scale',
                        metavar='SCALE', default=1.0)

    parser.add_argument('--origin-re', type=float,
                        dest='origin_re', help='real part of the view center',
                        metavar='ORIGIN_RE', default=0.0)

    parser.add_argument('--origin-im', type=float,
                        dest='origin_im', help='imaginary part of the view center',
                        metavar='ORIGIN_IM', default=0.0)

    parser.add_argument('--escape-radius-squared', type=float,
                        dest='squared_escape_radius', help='squared modulus beyond which an orbit counts as escaped',
                        metavar='RADIUS', default=4000.0)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of iterations per pixel',
                        metavar='MAX_ITERATIONS', default=500)

    parser.add_argument('--rotation', type=float,
                        dest='rotation', help='rotation of the sampled plane about 0, in radians',
                        metavar='RADIANS', default=0.0)

    parser.add_argument('--evaluator', choices=EVALUATORS, default='tensorflow',
                        help='"tensorflow" iterates whole bands at once; "python" evaluates pixel by pixel.')

    parser.add_argument('--rows-per-band', type=int,
                        dest='rows_per_band', help='rows evaluated per band in the first pass (default: whole frame)',
                        metavar='ROWS', default=None)

    parser.add_argument('--device', type=str, default=None,
                        help='TensorFlow device for the tensorflow evaluator, e.g. "/CPU:0". Default: first GPU if any.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    log("TensorFlow version: %s" % tf.__version__)

    params = RenderParameters(
        x_res=opt.x_res,
        y_res=opt.y_res,
        scale=opt.scale,
        origin_re=opt.origin_re,
        origin_im=opt.origin_im,
        squared_escape_radius=opt.squared_escape_radius,
        max_iterations=opt.max_iterations,
        rotation=opt.rotation,
    )

    device = opt.device
    if device is None and opt.evaluator == 'tensorflow':
        device = select_device()

    buffer = bytearray(BYTES_PER_PIXEL * max(opt.x_res, 0) * max(opt.y_res, 0))

    started = time.perf_counter()
    try:
        result = render_frame(
            params,
            buffer,
            evaluator=opt.evaluator,
            device=device,
            rows_per_band=opt.rows_per_band,
        )
    except ValidationError as exc:
        print("render failed: {0}".format(exc), file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - started

    total = opt.x_res * opt.y_res
    metadata = result.metadata
    log("view radius {0:.6g}, step {1:.6g} x {2:.6g}".format(metadata.radius, metadata.x_step, metadata.y_step))
    print("resolution: {0}x{1}".format(opt.x_res, opt.y_res))
    print("hue range: [{0:.6g}, {1:.6g}]".format(result.hue_range.min, result.hue_range.max))
    print("inside: {0} of {1} pixels ({2:.2%})".format(result.inside_pixels, total, result.inside_pixels / total))
    print("elapsed: {0:.3f}s".format(elapsed))
    print("sha256: {0}".format(hashlib.sha256(buffer).hexdigest()))
    return 0


if __name__ == '__main__':
    sys.exit(main())
