from __future__ import annotations

import logging
import sys

from clarifai_api import Client, ClientConfig, ColorRequest, TagRequest

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main() -> None:
    """
    Run info, tag and color once against the live service.

    Reads credentials from CLARIFAI_CLIENT_ID / CLARIFAI_CLIENT_SECRET (or
    CLARIFAI_ACCESS_TOKEN). Pass image URLs or local paths as arguments.
    """
    targets = sys.argv[1:] or ["https://samples.clarifai.com/metro-north.jpg"]
    client = Client.from_config(ClientConfig.from_env())

    info = client.info()
    print("=" * 40)
    print(f"INFO: {info.results}")

    if all(t.startswith(("http://", "https://")) for t in targets):
        tag_req, color_req = TagRequest(urls=targets), ColorRequest(urls=targets)
    else:
        tag_req, color_req = TagRequest(files=targets), ColorRequest(files=targets)

    for result in client.tag(tag_req).results:
        print("=" * 40)
        print(f"TAG {result.docid_str} {result.url}")
        for label, score in result.tags:
            print(f"  {label:<20} {score:.3f}")

    for result in client.color(color_req).results:
        print("=" * 40)
        print(f"COLOR {result.docid_str} {result.url}")
        for color in result.colors:
            print(f"  {color.hex} {color.density:.2%} {color.w3c.name}")


if __name__ == "__main__":
    main()
