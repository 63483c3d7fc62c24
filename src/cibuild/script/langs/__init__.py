"""Language profiles. Importing this package registers all of them."""

from cibuild.script.langs import android, c, cpp, generic, haskell, pure_java  # noqa: F401
