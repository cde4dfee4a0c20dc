# tcms_api/wsgi.py
from tcms_api import create_app

app = create_app()
