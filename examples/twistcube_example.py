"""
twistcube_example.py: Builds a TwistCube, grows its spiral and writes it out.

How to run this example:

- Grow the spiral and export it:
  python examples/twistcube_example.py

- The same from the command line tool, with a smaller cube:
  twistcube --size 50 --clicks 1 --stl --output-base twistcube
"""

import logging

from twistcube import TwistCubeSession


def main():
    # 1. Create the component, its group and its dynamic attributes.
    session = TwistCubeSession.create()

    # 2. Change the size option, as the component options dialog would.
    session.set_size(60)

    # 3. Click with the Interact tool and let the view run the animation.
    session.click()
    frames = session.play()
    print(f"{frames} frames, {len(session.copies)} copies")

    # 4. Export the result.
    session.export_stl("twistcube.stl")
    print("Exported STL: twistcube.stl")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
