"""Entry point wrapper for ``python -m chorale_generator``.

Execution is forwarded to :func:`chorale_generator.main` so running the
package as a module behaves exactly like the installed ``chorale-generator``
console script.

Example
-------
::

    python -m chorale_generator --key G --timesig 4/4 --measures 8 \
        --seed 7 --output chorale.mid
"""

from . import main

if __name__ == "__main__":
    main()
