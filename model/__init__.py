def load_all_models():
    import model.profiles.company                        # noqa: F401
    import model.profiles.community                      # noqa: F401
    import model.property.plan                           # noqa: F401
