from PIL import Image, ImageDraw


def render_quadrant(quadrant, out, depth=None):
    """
    Depth-first paint of the quadrant's leaves into out.

    With depth set, quadrants at that level are painted with their cached
    colour even if they are split.
    """
    if quadrant.leaf or quadrant.depth == depth:
        left, top, right, bottom = quadrant.bbox
        out[top:bottom, left:right] = quadrant.colour
        return

    for child in quadrant.children:
        render_quadrant(child, out, depth)


def create_image(tree, depth=None, show_lines=False):
    new_image = Image.fromarray(tree.render(depth=depth))

    if show_lines:
        draw = ImageDraw.Draw(new_image)
        for quadrant in tree.get_leaf_quadrants(depth):
            left, top, right, bottom = quadrant.bbox
            # ImageDraw rectangles include their far edge
            draw.rectangle((left, top, right - 1, bottom - 1), outline=(0, 0, 0))

    return new_image


def create_gif(tree, file_name, depth=None, duration=500, loop=0, show_lines=False, reverse=False):
    """Saves one frame per tree level, from the root colour down to depth."""
    if depth is None:
        depth = tree.tree_height()

    gif_frames = []
    for frame_depth in range(depth + 1):
        gif_frames.append(create_image(tree, frame_depth, show_lines=show_lines))

    # Hold the last level for a few frames
    end_frame = create_image(tree, depth, show_lines=show_lines)
    for _ in range(4):
        gif_frames.append(end_frame)
    if reverse:
        gif_frames.reverse()

    gif_frames[0].save(
        file_name,
        save_all=True,
        append_images=gif_frames[1:],
        duration=duration,
        loop=loop
    )
    return gif_frames
