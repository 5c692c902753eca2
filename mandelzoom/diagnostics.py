"""Verbose-gated console output and device selection.

The entry scripts lower TensorFlow's log level themselves before importing
this package; importing it changes no process state.
"""

import os

VERBOSE = False


def set_verbose(enabled):
    global VERBOSE
    VERBOSE = bool(enabled)


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


def select_device():
    """Pick ``/GPU:0`` when TensorFlow sees a GPU, else ``/CPU:0``."""

    import tensorflow as tf

    if not VERBOSE and os.environ.get("TF_CPP_MIN_LOG_LEVEL") != "0":
        tf.get_logger().setLevel("ERROR")

    log("TensorFlow version: %s" % tf.__version__)

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'

    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        # Memory growth can only be set before the GPUs are initialized.
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'
