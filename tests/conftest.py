import sys
import os

# Add python directory to path to allow imports without installing
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'python')))
