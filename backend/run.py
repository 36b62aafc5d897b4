"""
Flask Application Entry Point
Runs the Customs Sentinel API server
"""
from customs_sentinel import create_app

app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config['SENTINEL_CONFIG'].FLASK_DEBUG, host='0.0.0.0', port=5000)
