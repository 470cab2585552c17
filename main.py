import argparse
import os
import time

from PIL import Image

from render import create_gif, create_image
from tree import DEFAULT_TREE_DEPTH, QuadTree


def non_negative_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value!r}")
    return number


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="QuadTree image compression")

    parser.add_argument('input', help="Path to the input image file.")
    parser.add_argument(
        'output',
        help="Path of the compressed image. The extension selects the format."
    )
    parser.add_argument(
        'tolerance',
        type=non_negative_int,
        help="Regions whose mean deviation from their average colour is at most this are flattened."
    )

    parser.add_argument(
        '-d', '--depth',
        type=non_negative_int,
        default=DEFAULT_TREE_DEPTH,
        help=f"Maximum depth of the quadtree. Default is {DEFAULT_TREE_DEPTH}."
    )

    parser.add_argument(
        '-w', '--weighted',
        action='store_true',
        help="Average child colours by pixel count instead of a plain mean."
    )

    parser.add_argument(
        '-sl', '--show-lines',
        action='store_true',
        help="Outline every flattened region in black."
    )

    # Every sweep tolerance gets its own output file
    parser.add_argument(
        '-s', '--sweep',
        type=non_negative_int,
        nargs='+',
        default=[],
        help="Extra tolerances to prune with, saved next to OUTPUT with a tolerance suffix."
    )

    parser.add_argument(
        '-g', '--gif',
        help="Also save a GIF that refines the image one tree level per frame, "
             "drawn from the tree pruned with TOLERANCE."
    )

    parser.add_argument(
        '-r', '--reverse',
        action='store_true',
        help="Play the GIF from fine to coarse."
    )

    return parser.parse_args(argv)


def open_image(in_path):
    """Decodes any format Pillow understands into an RGB image."""
    with Image.open(in_path) as image:
        return image.convert("RGB")


def output_path(out_path, tolerance):
    """out.png -> out-tolerance=5.png"""
    root, extension = os.path.splitext(out_path)
    return f"{root}-tolerance={tolerance}{extension}"


def compress_image(quadtree, out_path, tolerance, sweep=(), show_lines=False, gif=None, reverse=False):
    """
    Prunes the tree and saves the rendered result after each tolerance.

    Tolerances are applied in increasing order since pruning only ever
    removes nodes. The main tolerance is written to out_path, the sweep
    values next to it with a tolerance suffix. Returns a list of
    (tolerance, path, leaf count) for every image written.

    The GIF, if asked for, is drawn right after the main tolerance so that
    sweep values above it do not show up in the animation.
    """
    targets = {tolerance: out_path}
    for extra in sweep:
        targets.setdefault(extra, output_path(out_path, extra))

    written = []
    for current in sorted(targets):
        quadtree.prune(current)
        create_image(quadtree, show_lines=show_lines).save(targets[current])
        written.append((current, targets[current], quadtree.count_leaves()))
        if gif is not None and current == tolerance:
            create_gif(quadtree, gif, show_lines=show_lines, reverse=reverse)

    return written


def main(argv=None):
    start_time = time.perf_counter()
    args = parse_arguments(argv)

    try:
        if not os.path.exists(args.input):
            raise FileNotFoundError(f"File not found: {args.input}")

        image = open_image(args.input)

    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1
    except OSError as e:
        print(f"Error: Unable to open the image file. {e}")
        return 1
    else:
        print("Image successfully loaded.")

    try:
        quadtree = QuadTree(image, args.depth, weighted=args.weighted)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    print(f"requested height: {args.depth}, actual height = {quadtree.tree_height()}")

    try:
        written = compress_image(
            quadtree, args.output, args.tolerance,
            sweep=args.sweep, show_lines=args.show_lines,
            gif=args.gif, reverse=args.reverse
        )
    except (OSError, ValueError) as e:
        print(f"Error: Unable to save the image. {e}")
        return 1

    for tolerance, path, leaves in written:
        print(f"rendered compressed image at {path} (tolerance={tolerance}, leaves={leaves})")
    if args.gif is not None:
        print(f"saved animation at {args.gif}")

    end_time = time.perf_counter()
    elapsed_time = end_time - start_time
    print(f"Function executed in {elapsed_time:.4f} seconds")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
