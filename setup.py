import setuptools

setuptools.setup(
    name="amongst",
    version="0.1.0",
    description="Session and protocol core for a small line-delimited JSON social deduction game server.",
    packages=setuptools.find_packages(include=["amongst", "amongst.*"]),
    install_requires=[
        "eventlet",
        "flask",
        "flask-socketio",
        "flask-login",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-timeout>=2.3",
        ],
    },
)
