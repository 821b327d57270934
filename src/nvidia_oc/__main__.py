from nvidia_oc.cli import main

main(prog_name="nvidia-oc")
