#!/usr/bin/env python3
"""
Autoservice - Web Interface Entry Point

Run this script to start the web application:
    python3 run_autoservice.py

Then open your browser to: http://127.0.0.1:8487
"""

from flask_app import create_app
import os

app = create_app(os.getenv('FLASK_CONFIG', 'development'))

if __name__ == '__main__':
    # Get port from environment variable or use default
    port = int(os.getenv('PORT', 8487))

    app.logger.info("Autoservice web interface on http://127.0.0.1:%s (CTRL+C to stop)", port)

    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=port)
