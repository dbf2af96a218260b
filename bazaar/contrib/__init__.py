"""
Contrib — optional integrations. Access integrations via submodules.

    from bazaar.contrib import fastapi
    # app = fastapi.create_app(coordinator, session=get_session)
"""
