# module bundlestore.app
from bundlestore.app_setup.factory import create_app

# App globale
app = create_app()
