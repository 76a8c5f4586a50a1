"""
Elastic Beanstalk Entry Point
"""
import logging
import os
import sys

# Add the current directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

from backend.app import app as application

# For local testing
if __name__ == "__main__":
    application.run(debug=True)
