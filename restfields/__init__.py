__title__ = "restfields"
__version__ = "1.0.0"
__author__ = "restfields contributors"
__license__ = "MIT"
__copyright__ = "2026 restfields contributors"
