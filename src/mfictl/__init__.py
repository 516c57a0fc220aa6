"""
mFi control (mfictl).

Command-line control of Ubiquiti mFi power switches and dimmers: turn a
port on or off, or report its status.
"""

__version__ = "1.0.0"
