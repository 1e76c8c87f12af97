"""Feature engineering for forecast windows.

Modules
-------
extractor    - fixed 5-element feature vector per forecast (model input)
orientation  - wind direction vs beach orientation -> WindOrientation
"""
