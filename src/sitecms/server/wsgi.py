"""
WSGI Entry Point for the Content Store Service.
"""

from sitecms.server.app import create_app

application = create_app()
app = application

if __name__ == "__main__":
    application.run(
        host=application.config['HOST'],
        port=application.config['PORT'],
    )
